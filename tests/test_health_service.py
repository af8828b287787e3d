"""Tests for health metrics, HbA1c readings and risk annotation."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from sqlalchemy import select

from grocerywatch.core.models import ItemCategory, SugarHealth
from grocerywatch.schemas.health import (
    HealthAnalysis,
    HealthMetricsCreate,
    SugarHealthUpdate,
    SugarRecommendations,
)
from grocerywatch.services import (
    ContentKind,
    ContentService,
    HealthService,
    NullContentGenerator,
)


async def test_latest_metrics_empty(session):
    assert await HealthService(session).latest_metrics() is None


async def test_latest_metrics_is_newest(session):
    service = HealthService(session)
    now = datetime.now(timezone.utc)
    await service.record_metrics(
        HealthMetricsCreate(sugar_level=90, last_updated=now)
    )
    await service.record_metrics(
        HealthMetricsCreate(
            sugar_level=150, last_updated=now - timedelta(days=30)
        )
    )

    latest = await service.latest_metrics()
    assert latest.sugar_level == 90


async def test_analysis_without_metrics(session):
    result = await HealthService(session).analyze_risks(
        ContentService(NullContentGenerator()), []
    )
    assert result.source == "none"
    assert result.analysis.risk_level == "Unknown"


async def test_analysis_with_blood_pressure(session, day, make_record):
    service = HealthService(session)
    await service.record_metrics(
        HealthMetricsCreate(
            blood_pressure_systolic=150, blood_pressure_diastolic=95
        )
    )

    result = await service.analyze_risks(
        ContentService(NullContentGenerator()),
        [make_record(day, product_name="Butter")],
    )

    assert result.source == "fallback"
    assert result.analysis.risk_level == "High"
    assert result.analysis.risks == ["High blood pressure"]
    assert result.analysis.avoid_items[0].startswith("Butter")


async def test_analysis_passes_context_to_generator(session, day, make_record):
    service = HealthService(session)
    await service.record_metrics(HealthMetricsCreate(cholesterol=210))
    generator = NullContentGenerator()
    generator.generate = AsyncMock(
        return_value=HealthAnalysis(risk_level="Medium")
    )
    items = [make_record(day)]

    result = await service.analyze_risks(ContentService(generator), items)

    assert result.source == "ai"
    kind, context = generator.generate.await_args.args
    assert kind == ContentKind.HEALTH_ANALYSIS
    assert context["metrics"].cholesterol == 210
    assert context["available_items"] == items


async def test_hba1c_empty(session):
    latest = await HealthService(session).latest_hba1c()
    assert latest.hba1c is None
    assert latest.last_updated is None


async def test_hba1c_reading_replaces_previous(session, day, make_record):
    service = HealthService(session)
    content = ContentService(NullContentGenerator())

    await service.record_hba1c(SugarHealthUpdate(hba1c=5.2), content, [])
    response = await service.record_hba1c(
        SugarHealthUpdate(hba1c=6.9),
        content,
        [
            make_record(
                day,
                product_name="Grape Soda",
                category=ItemCategory.BEVERAGES,
            )
        ],
    )

    assert response.source == "fallback"
    assert response.recommendations.hba1c_range == "Diabetes"
    assert response.recommendations.high_sugar_items == [
        "Grape Soda (Beverages)"
    ]
    assert (await service.latest_hba1c()).hba1c == 6.9
    rows = (await session.execute(select(SugarHealth))).scalars().all()
    assert len(rows) == 1


async def test_hba1c_passes_context_to_generator(session, day, make_record):
    generator = NullContentGenerator()
    generator.generate = AsyncMock(
        return_value=SugarRecommendations(hba1c_range="Normal", summary="ok")
    )
    items = [make_record(day)]

    response = await HealthService(session).record_hba1c(
        SugarHealthUpdate(hba1c=5.0), ContentService(generator), items
    )

    assert response.source == "ai"
    kind, context = generator.generate.await_args.args
    assert kind == ContentKind.SUGAR_RECOMMENDATIONS
    assert context == {"hba1c": 5.0, "available_items": items}
