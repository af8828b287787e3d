"""HbA1c sugar-health endpoints."""

import typing as t

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from grocerywatch.core.database import get_db
from grocerywatch.core.dependencies import (
    get_content_service,
    get_item_service,
    to_http_exception,
)
from grocerywatch.core.models import ItemStatus
from grocerywatch.schemas.health import (
    SugarHealthRecord,
    SugarHealthResponse,
    SugarHealthUpdate,
)
from grocerywatch.services import (
    ContentService,
    HealthService,
    ItemService,
    PersistenceError,
)

ROUTER = APIRouter(prefix="/sugar-health", tags=["Health"])


@ROUTER.post("/update", response_model=SugarHealthResponse)
async def update_sugar_health(
    reading: SugarHealthUpdate,
    db: t.Annotated[AsyncSession, Depends(get_db)],
    service: t.Annotated[ItemService, Depends(get_item_service)],
    content: t.Annotated[ContentService, Depends(get_content_service)],
) -> SugarHealthResponse:
    """Record an HbA1c reading and get advice on the active inventory.

    Args:
        reading (SugarHealthUpdate): The HbA1c value, above 0 and at most 20.
        db (AsyncSession): The database session.
        service (ItemService): The item service.
        content (ContentService): The content service.

    Returns:
        SugarHealthResponse: The stored reading and recommendations.
    """
    try:
        active = await service.list_items(status=ItemStatus.ACTIVE)
    except PersistenceError as exc:
        raise to_http_exception(exc) from exc

    return await HealthService(db).record_hba1c(
        reading, content, active.items
    )


@ROUTER.get("/data", response_model=SugarHealthRecord)
async def get_sugar_health(
    db: t.Annotated[AsyncSession, Depends(get_db)],
) -> SugarHealthRecord:
    """Get the stored HbA1c reading.

    Args:
        db (AsyncSession): The database session.

    Returns:
        SugarHealthRecord: The reading, all null if none was recorded.
    """
    return await HealthService(db).latest_hba1c()
