"""Expiry classification and the expiring-soon view."""

import typing as t
from dataclasses import dataclass
from datetime import date

from grocerywatch.core.models import ItemStatus, UrgencyBand
from grocerywatch.schemas.grocery_item import GroceryItemRecord
from grocerywatch.utils.dates import (
    DateLike,
    calculate_days_until_expiration,
    parse_date,
)

URGENT_DAYS: int = 1
WARNING_DAYS: int = 3
NOTICE_DAYS: int = 7


@dataclass(frozen=True)
class ExpiryVerdict:
    """Date-derived expiry classification of an item."""

    is_expired: bool
    days_until_expiry: int

    @property
    def urgency(self) -> UrgencyBand:
        """Urgency band used for display and ordering."""
        match self.days_until_expiry:
            case _ if self.is_expired:
                return UrgencyBand.EXPIRED
            case d if d <= URGENT_DAYS:
                return UrgencyBand.URGENT
            case d if d <= WARNING_DAYS:
                return UrgencyBand.WARNING
            case d if d <= NOTICE_DAYS:
                return UrgencyBand.NOTICE
            case _:
                return UrgencyBand.FRESH

    @property
    def status(self) -> ItemStatus:
        """The active/expired status this verdict implies."""
        return ItemStatus.EXPIRED if self.is_expired else ItemStatus.ACTIVE


def classify(expiry_date: DateLike, today: DateLike) -> ExpiryVerdict:
    """Classify an expiry date relative to today.

    Dates are compared at whole-day resolution; time of day is ignored.

    Args:
        expiry_date (DateLike): The item's expiry date.
        today (DateLike): The reference day.

    Raises:
        InvalidDateError: If either date cannot be parsed.

    Returns:
        ExpiryVerdict: Whether the item is expired and how many days remain.
    """
    days: int = calculate_days_until_expiration(
        parse_date(expiry_date), parse_date(today)
    )
    return ExpiryVerdict(is_expired=days < 0, days_until_expiry=days)


def derive_status(expiry_date: DateLike, today: DateLike) -> ItemStatus:
    """Return the active/expired status implied by the expiry date.

    Args:
        expiry_date (DateLike): The item's expiry date.
        today (DateLike): The reference day.

    Returns:
        ItemStatus: ``expired`` when the date has passed, else ``active``.
    """
    return classify(expiry_date, today).status


def expiring_soon(
    items: t.Iterable[GroceryItemRecord],
    today: date,
    window_days: int,
) -> t.List[GroceryItemRecord]:
    """Select active items expiring within the lookahead window.

    Args:
        items (Iterable[GroceryItemRecord]):
            Candidate items, in insertion order.
        today (date):
            The reference day.
        window_days (int):
            Inclusive lookahead window in days.

    Returns:
        List[GroceryItemRecord]:
            Active items with ``0 <= days_until_expiry <= window_days``,
            soonest first. Ties keep their input order.
    """
    selected: t.List[GroceryItemRecord] = [
        item
        for item in items
        if item.status == ItemStatus.ACTIVE
        and 0
        <= classify(item.expiry_date, today).days_until_expiry
        <= window_days
    ]
    return sorted(selected, key=lambda item: item.expiry_date)
