"""Schemas for real-time change notifications."""

import enum
import typing as t

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from grocerywatch.schemas.grocery_item import GroceryItemRecord


class EventType(str, enum.Enum):
    """Kinds of change notification pushed to subscribers."""

    ITEM_ADDED = "item_added"
    ITEM_UPDATED = "item_updated"
    ITEM_DELETED = "item_deleted"
    ITEMS_EXPIRING = "items_expiring"
    ITEM_NEWLY_EXPIRING = "item_newly_expiring"


class NotificationEvent(BaseModel):
    """Self-describing envelope delivered to every connected subscriber."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    type: EventType
    item: GroceryItemRecord | None = None
    items: t.List[GroceryItemRecord] | None = None
    item_id: str | None = None
    message: str | None = None

    def to_message(self) -> t.Dict[str, t.Any]:
        """Serialize the event as a JSON-ready envelope.

        Returns:
            Dict[str, Any]: The envelope with camelCase keys, absent
                fields omitted.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def item_added(item: GroceryItemRecord) -> NotificationEvent:
    """Build an ``item_added`` event."""
    return NotificationEvent(type=EventType.ITEM_ADDED, item=item)


def item_updated(item: GroceryItemRecord) -> NotificationEvent:
    """Build an ``item_updated`` event."""
    return NotificationEvent(type=EventType.ITEM_UPDATED, item=item)


def item_deleted(item_id: str) -> NotificationEvent:
    """Build an ``item_deleted`` event."""
    return NotificationEvent(type=EventType.ITEM_DELETED, item_id=item_id)


def items_expiring(
    items: t.Sequence[GroceryItemRecord], window_days: int
) -> NotificationEvent:
    """Build an ``items_expiring`` batch event."""
    return NotificationEvent(
        type=EventType.ITEMS_EXPIRING,
        items=list(items),
        message=(
            f"{len(items)} items are expiring within {window_days} days!"
        ),
    )


def item_newly_expiring(item: GroceryItemRecord) -> NotificationEvent:
    """Build an ``item_newly_expiring`` event."""
    return NotificationEvent(
        type=EventType.ITEM_NEWLY_EXPIRING,
        item=item,
        message=f'New item "{item.product_name}" is expiring soon!',
    )
