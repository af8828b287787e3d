"""Pydantic schemas for health metrics and risk annotation."""

import typing as t
from datetime import datetime

from pydantic import ConfigDict, Field

from grocerywatch.schemas.grocery_item import CamelModel


class HealthMetricsCreate(CamelModel):
    """Schema for recording a new set of health metrics."""

    sugar_level: float | None = Field(None, ge=0)
    cholesterol: float | None = Field(None, ge=0)
    blood_pressure_systolic: float | None = Field(None, ge=0)
    blood_pressure_diastolic: float | None = Field(None, ge=0)
    weight: float | None = Field(None, ge=0)
    height: float | None = Field(None, ge=0)
    last_updated: datetime | None = None


class HealthMetricsResponse(CamelModel):
    """Schema for stored health metrics.

    Every field is null when nothing has been recorded yet.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    sugar_level: float | None = None
    cholesterol: float | None = None
    blood_pressure_systolic: float | None = None
    blood_pressure_diastolic: float | None = None
    weight: float | None = None
    height: float | None = None
    last_updated: datetime | None = None


class HealthAnalysis(CamelModel):
    """Risk annotation derived from health metrics and the inventory."""

    risk_level: str
    risks: t.List[str] = Field(default_factory=list)
    recommendations: t.List[str] = Field(default_factory=list)
    avoid_items: t.List[str] = Field(default_factory=list)
    preferred_items: t.List[str] = Field(default_factory=list)


class HealthAnalysisResponse(CamelModel):
    """Schema for the risk analysis endpoint."""

    analysis: HealthAnalysis
    source: str


class HealthFact(CamelModel):
    """A food-waste or nutrition fact with its source."""

    fact: str
    source: str
    impact: str = ""


class HealthFactsRequest(CamelModel):
    """Schema for requesting health facts."""

    topic: str = Field("food waste", min_length=1, max_length=200)
    count: int = Field(5, ge=1, le=20)


class HealthFactsResponse(CamelModel):
    """Schema for health facts response."""

    facts: t.List[HealthFact]
    source: str


class SugarHealthUpdate(CamelModel):
    """Schema for recording an HbA1c reading (percent)."""

    hba1c: float = Field(..., gt=0, le=20, alias="hbA1c")
    last_updated: datetime | None = None


class SugarHealthRecord(CamelModel):
    """Schema for the stored HbA1c reading; null when none exists."""

    hba1c: float | None = Field(None, alias="hbA1c")
    last_updated: datetime | None = None


class SugarRecommendations(CamelModel):
    """Dietary advice for an HbA1c reading and the active inventory."""

    hba1c_range: str
    summary: str
    high_sugar_items: t.List[str] = Field(default_factory=list)
    recommendations: t.List[str] = Field(default_factory=list)
    alternatives: t.List[str] = Field(default_factory=list)


class SugarHealthResponse(SugarHealthRecord):
    """Schema for the HbA1c update endpoint."""

    recommendations: SugarRecommendations
    source: str
