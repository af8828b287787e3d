"""Pydantic schemas for grocery item request/response validation."""

import typing as t
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from grocerywatch.core.models import ItemCategory, ItemStatus, UrgencyBand


class CamelModel(BaseModel):
    """Base model exchanging camelCase JSON while keeping snake_case fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class GroceryItemBase(CamelModel):
    """Base grocery item schema."""

    product_name: str = Field(..., min_length=1, max_length=255)
    category: ItemCategory = ItemCategory.OTHER
    quantity: int = Field(..., ge=1)
    expiry_date: date


class GroceryItemCreate(GroceryItemBase):
    """Schema for creating a new grocery item."""


class GroceryItemUpdate(CamelModel):
    """Schema for updating a grocery item.

    Every field is optional; only the fields sent are applied.
    """

    product_name: str | None = Field(None, min_length=1, max_length=255)
    category: ItemCategory | None = None
    quantity: int | None = Field(None, ge=1)
    expiry_date: date | None = None
    status: ItemStatus | None = None


class GroceryItemRecord(GroceryItemBase):
    """Persisted shape of a grocery item."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    purchase_date: date
    status: ItemStatus
    completed_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class GroceryItemResponse(GroceryItemRecord):
    """Schema for grocery item response, with derived expiry fields."""

    days_until_expiry: int
    urgency: UrgencyBand


class GroceryItemListResponse(CamelModel):
    """Schema for grocery item list response."""

    items: t.List[GroceryItemResponse]
    total: int


class ExpiringItemsResponse(CamelModel):
    """Schema for the expiring-soon view."""

    items: t.List[GroceryItemResponse]
    total: int
    window_days: int


class ExpiryCheckResponse(CamelModel):
    """Schema for a manually triggered expiry sweep."""

    message: str
    changed_items: int
    expiring_items: int


class LabelScanRequest(CamelModel):
    """Schema for submitting recognised label text."""

    text: str = Field(..., max_length=10000)


class LabelGuess(CamelModel):
    """Best-effort structured guess extracted from a product label."""

    product_name: str | None = None
    expiry_date: date | None = None
    quantity: int | None = None
    category: ItemCategory | None = None


class WastedItemValue(CamelModel):
    """Estimated market value of one wasted item."""

    product_name: str
    category: str
    quantity: int
    price_per_unit: float
    total_wasted_amount: float


class WastedValueResponse(CamelModel):
    """Schema for wasted value estimation."""

    items: t.List[WastedItemValue]
    total_wasted_amount: float
    source: str
