"""FastAPI application entry point."""

import logging
import typing as t
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grocerywatch.core.config import SETTINGS
from grocerywatch.core.database import close_db, init_db
from grocerywatch.core.dependencies import get_item_service
from grocerywatch.core.globals import OPENAPI_TAGS
from grocerywatch.routers import api_router, ws_router
from grocerywatch.services import (
    ChangeNotifier,
    ContentService,
    ItemService,
    TextLabelExtractor,
    build_content_generator,
)
from grocerywatch.services.expiration_checker import (
    check_expiring_items_task,
)

logging.basicConfig(
    level=logging.DEBUG if SETTINGS.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
LOGGER: logging.Logger = logging.getLogger(__name__)

SCHEDULER: AsyncIOScheduler = AsyncIOScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI) -> t.AsyncGenerator[None, None]:
    """Application lifespan events.

    Args:
        app (FastAPI): The FastAPI application instance.
    """
    LOGGER.info("Starting GroceryWatch API...")
    await init_db()
    LOGGER.info("Database tables initialized")

    notifier = ChangeNotifier(SETTINGS.notifier_queue_size)
    app.state.notifier = notifier
    app.state.content_service = ContentService(
        build_content_generator(SETTINGS)
    )
    app.state.label_extractor = TextLabelExtractor()

    SCHEDULER.add_job(
        check_expiring_items_task,
        trigger=IntervalTrigger(hours=SETTINGS.check_expiration_interval_hours),
        args=[notifier],
        id="expiration_check",
        name="Reconcile item statuses and alert on expiring items",
        replace_existing=True,
    )
    SCHEDULER.start()
    LOGGER.info(
        "Expiration checker scheduled to run every %d hours",
        SETTINGS.check_expiration_interval_hours,
    )

    await check_expiring_items_task(notifier)

    yield

    LOGGER.info("Shutting down GroceryWatch...")
    SCHEDULER.shutdown(wait=False)
    await close_db()
    LOGGER.info("Cleanup complete")


APPLICATION: FastAPI = FastAPI(
    title=SETTINGS.app_name,
    description="GroceryWatch - Track groceries and waste less food",
    version=SETTINGS.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=OPENAPI_TAGS,
)

APPLICATION.add_middleware(
    CORSMiddleware,
    allow_origins=SETTINGS.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

APPLICATION.include_router(api_router)
APPLICATION.include_router(ws_router)


@APPLICATION.get("/health", tags=["Health"])
async def health_check(
    service: t.Annotated[ItemService, Depends(get_item_service)],
) -> t.Dict[str, t.Any]:
    """Health check endpoint for monitoring.

    Args:
        service (ItemService): The item service.

    Returns:
        t.Dict[str, t.Any]:
            The health status, stored item count and connected clients.
    """
    return {
        "status": "healthy",
        "items": await service.count_items(),
        "connectedClients": service.notifier.subscriber_count,
    }
