"""Health service - health metrics, HbA1c readings and risk annotation."""

import logging
import typing as t
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from grocerywatch.core.models import HealthMetrics, SugarHealth
from grocerywatch.schemas.grocery_item import GroceryItemRecord
from grocerywatch.schemas.health import (
    HealthAnalysis,
    HealthAnalysisResponse,
    HealthMetricsCreate,
    HealthMetricsResponse,
    SugarHealthRecord,
    SugarHealthResponse,
    SugarHealthUpdate,
)
from grocerywatch.services.content_generator import ContentKind
from grocerywatch.services.content_service import ContentService

LOGGER: logging.Logger = logging.getLogger(__name__)

NO_DATA_ANALYSIS: HealthAnalysis = HealthAnalysis(
    risk_level="Unknown",
    risks=["No health data available"],
    recommendations=[
        "Please enter your health metrics to get personalized "
        "recommendations"
    ],
)


class HealthService:
    """Service class for health metrics operations."""

    db: AsyncSession

    def __init__(self, db: AsyncSession) -> None:
        """Initialize HealthService.

        Args:
            db (AsyncSession): The database session.
        """
        self.db = db

    async def record_metrics(
        self, metrics_data: HealthMetricsCreate
    ) -> HealthMetricsResponse:
        """Append a new set of health metrics.

        Args:
            metrics_data (HealthMetricsCreate): The measured values.

        Returns:
            HealthMetricsResponse: The stored metrics.
        """
        values: t.Dict[str, t.Any] = metrics_data.model_dump(
            exclude_none=True
        )
        metrics: HealthMetrics = HealthMetrics(**values)
        self.db.add(metrics)
        await self.db.flush()
        await self.db.refresh(metrics)
        LOGGER.info("Recorded health metrics %d", metrics.id)
        return HealthMetricsResponse.model_validate(metrics)

    async def latest_metrics(self) -> HealthMetricsResponse | None:
        """Get the most recent health metrics.

        Returns:
            HealthMetricsResponse | None: The newest row, if any.
        """
        metrics: HealthMetrics | None = (
            await self.db.execute(
                select(HealthMetrics)
                .order_by(
                    HealthMetrics.last_updated.desc(),
                    HealthMetrics.id.desc(),
                )
                .limit(1)
            )
        ).scalar_one_or_none()
        if metrics is None:
            return None
        return HealthMetricsResponse.model_validate(metrics)

    async def analyze_risks(
        self,
        content: ContentService,
        inventory: t.Sequence[GroceryItemRecord],
    ) -> HealthAnalysisResponse:
        """Annotate health risks against the current inventory.

        Args:
            content (ContentService): Content generation with fallbacks.
            inventory (Sequence[GroceryItemRecord]): Current items.

        Returns:
            HealthAnalysisResponse: The analysis and its source.
        """
        metrics: HealthMetricsResponse | None = await self.latest_metrics()
        if metrics is None:
            return HealthAnalysisResponse(
                analysis=NO_DATA_ANALYSIS, source="none"
            )

        generated = await content.generate(
            ContentKind.HEALTH_ANALYSIS,
            {"metrics": metrics, "available_items": list(inventory)},
        )
        return HealthAnalysisResponse(
            analysis=generated.data, source=generated.source
        )

    async def _sugar_row(self) -> SugarHealth | None:
        return (
            await self.db.execute(
                select(SugarHealth).order_by(SugarHealth.id).limit(1)
            )
        ).scalar_one_or_none()

    async def latest_hba1c(self) -> SugarHealthRecord:
        """Get the stored HbA1c reading.

        Returns:
            SugarHealthRecord: The reading, all null if none was recorded.
        """
        row: SugarHealth | None = await self._sugar_row()
        if row is None:
            return SugarHealthRecord()
        return SugarHealthRecord(
            hba1c=row.hba1c, last_updated=row.last_updated
        )

    async def record_hba1c(
        self,
        reading: SugarHealthUpdate,
        content: ContentService,
        inventory: t.Sequence[GroceryItemRecord],
    ) -> SugarHealthResponse:
        """Store the HbA1c reading and advise on the inventory.

        Only one reading is kept; a new one replaces the previous value.

        Args:
            reading (SugarHealthUpdate): The measured HbA1c.
            content (ContentService): Content generation with fallbacks.
            inventory (Sequence[GroceryItemRecord]): Current items.

        Returns:
            SugarHealthResponse: The stored reading and recommendations.
        """
        row: SugarHealth | None = await self._sugar_row()
        if row is None:
            row = SugarHealth()
            self.db.add(row)
        row.hba1c = reading.hba1c
        row.last_updated = reading.last_updated or datetime.now(timezone.utc)
        await self.db.flush()
        LOGGER.info("Recorded HbA1c reading %.1f", row.hba1c)

        generated = await content.generate(
            ContentKind.SUGAR_RECOMMENDATIONS,
            {"hba1c": row.hba1c, "available_items": list(inventory)},
        )
        return SugarHealthResponse(
            hba1c=row.hba1c,
            last_updated=row.last_updated,
            recommendations=generated.data,
            source=generated.source,
        )
