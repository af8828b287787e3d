"""Routers package."""

from grocerywatch.routers.api import ROUTER as api_router
from grocerywatch.routers.api import WS_ROUTER as ws_router

__all__ = ["api_router", "ws_router"]
