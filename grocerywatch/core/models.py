"""SQLAlchemy database models."""

import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, Enum, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from grocerywatch.core.database import Base


class ItemStatus(str, enum.Enum):
    """Persisted lifecycle status of a grocery item."""

    ACTIVE = "active"
    EXPIRED = "expired"
    COMPLETED = "completed"


class ItemCategory(str, enum.Enum):
    """Fixed set of grocery categories."""

    FRUITS = "Fruits"
    VEGETABLES = "Vegetables"
    DAIRY = "Dairy"
    MEAT = "Meat"
    GRAINS = "Grains"
    BEVERAGES = "Beverages"
    SNACKS = "Snacks"
    FROZEN = "Frozen"
    PANTRY = "Pantry"
    OTHER = "Other"


class UrgencyBand(str, enum.Enum):
    """Display urgency derived from the days left before expiry."""

    FRESH = "fresh"
    NOTICE = "notice"
    WARNING = "warning"
    URGENT = "urgent"
    EXPIRED = "expired"


def _new_item_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GroceryItem(Base):  # pylint: disable=too-few-public-methods
    """Grocery item tracked in the household inventory."""

    __tablename__ = "grocery_items"

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, default=_new_item_id
    )
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[ItemCategory] = mapped_column(
        Enum(
            ItemCategory,
            values_callable=lambda enum_cls: [m.value for m in enum_cls],
        ),
        nullable=False,
        default=ItemCategory.OTHER,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    purchase_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[ItemStatus] = mapped_column(
        Enum(
            ItemStatus,
            values_callable=lambda enum_cls: [m.value for m in enum_cls],
        ),
        nullable=False,
        default=ItemStatus.ACTIVE,
    )
    completed_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Python-side timestamps keep sub-second resolution for ordering
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("ix_grocery_items_expiry_date", "expiry_date"),
        Index("ix_grocery_items_status", "status"),
        Index("ix_grocery_items_category", "category"),
        Index("ix_grocery_items_created_at", "created_at"),
    )


class HealthMetrics(Base):  # pylint: disable=too-few-public-methods
    """Snapshot of household health metrics used for risk annotation."""

    __tablename__ = "health_metrics"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    sugar_level: Mapped[float | None] = mapped_column(Float, nullable=True)
    cholesterol: Mapped[float | None] = mapped_column(Float, nullable=True)
    blood_pressure_systolic: Mapped[float | None] = mapped_column(
        Float, nullable=True
    )
    blood_pressure_diastolic: Mapped[float | None] = mapped_column(
        Float, nullable=True
    )
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    height: Mapped[float | None] = mapped_column(Float, nullable=True)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )


class SugarHealth(Base):  # pylint: disable=too-few-public-methods
    """Latest HbA1c reading; the table holds at most one row."""

    __tablename__ = "sugar_health"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    hba1c: Mapped[float | None] = mapped_column(Float, nullable=True)
    last_updated: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
