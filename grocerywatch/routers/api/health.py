"""Health metrics and risk annotation endpoints."""

import typing as t

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from grocerywatch.core.database import get_db
from grocerywatch.core.dependencies import (
    get_content_service,
    get_item_service,
    to_http_exception,
)
from grocerywatch.schemas.health import (
    HealthAnalysisResponse,
    HealthFactsRequest,
    HealthFactsResponse,
    HealthMetricsCreate,
    HealthMetricsResponse,
)
from grocerywatch.services import (
    ContentService,
    HealthService,
    ItemService,
    PersistenceError,
)

ROUTER = APIRouter(prefix="/health-metrics", tags=["Health"])


@ROUTER.get("", response_model=HealthMetricsResponse)
async def get_latest_metrics(
    db: t.Annotated[AsyncSession, Depends(get_db)],
) -> HealthMetricsResponse:
    """Get the most recent health metrics.

    Args:
        db (AsyncSession): The database session.

    Returns:
        HealthMetricsResponse: The newest metrics, all null if none exist.
    """
    return await HealthService(db).latest_metrics() or HealthMetricsResponse()


@ROUTER.post(
    "",
    response_model=HealthMetricsResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_metrics(
    metrics_data: HealthMetricsCreate,
    db: t.Annotated[AsyncSession, Depends(get_db)],
) -> HealthMetricsResponse:
    """Record a new set of health metrics.

    Args:
        metrics_data (HealthMetricsCreate): The measured values.
        db (AsyncSession): The database session.

    Returns:
        HealthMetricsResponse: The stored metrics.
    """
    return await HealthService(db).record_metrics(metrics_data)


@ROUTER.get("/risk-analysis", response_model=HealthAnalysisResponse)
async def get_risk_analysis(
    db: t.Annotated[AsyncSession, Depends(get_db)],
    service: t.Annotated[ItemService, Depends(get_item_service)],
    content: t.Annotated[ContentService, Depends(get_content_service)],
) -> HealthAnalysisResponse:
    """Annotate health risks against the current inventory.

    Args:
        db (AsyncSession): The database session.
        service (ItemService): The item service.
        content (ContentService): The content service.

    Returns:
        HealthAnalysisResponse: The analysis and its source.
    """
    try:
        inventory = await service.list_items()
    except PersistenceError as exc:
        raise to_http_exception(exc) from exc

    return await HealthService(db).analyze_risks(content, inventory.items)


@ROUTER.post("/facts", response_model=HealthFactsResponse)
async def get_health_facts(
    facts_request: HealthFactsRequest,
    content: t.Annotated[ContentService, Depends(get_content_service)],
) -> HealthFactsResponse:
    """Get facts about food waste and nutrition.

    Args:
        facts_request (HealthFactsRequest): Topic and number of facts.
        content (ContentService): The content service.

    Returns:
        HealthFactsResponse: The facts and their source.
    """
    return await content.health_facts(facts_request.topic, facts_request.count)
