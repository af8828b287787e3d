"""API routes package."""

from fastapi import APIRouter

from grocerywatch.routers.api import (
    health,
    items,
    notifications,
    recipes,
    sugar_health,
)

# Create main API router with /api prefix
ROUTER = APIRouter(prefix="/api")

# Include all sub-routers
ROUTER.include_router(items.ROUTER)
ROUTER.include_router(recipes.ROUTER)
ROUTER.include_router(health.ROUTER)
ROUTER.include_router(sugar_health.ROUTER)

# The change stream lives at the root, outside the /api prefix
WS_ROUTER = notifications.ROUTER

__all__ = [
    "health",
    "items",
    "notifications",
    "recipes",
    "sugar_health",
    "ROUTER",
    "WS_ROUTER",
]
