"""Keep stored item statuses consistent with their expiry dates."""

import logging
import typing as t
from dataclasses import dataclass, field
from datetime import date

from grocerywatch.core.models import ItemStatus
from grocerywatch.schemas.grocery_item import GroceryItemRecord
from grocerywatch.schemas.notifications import item_updated
from grocerywatch.services.expiry_classifier import derive_status
from grocerywatch.services.item_store import (
    ItemNotFoundError,
    PersistenceError,
)
from grocerywatch.services.notifier import ChangeNotifier

LOGGER: logging.Logger = logging.getLogger(__name__)


class StatusWriter(t.Protocol):
    """Store capabilities the reconciler needs."""

    async def set_status(
        self, item_id: str, expected: ItemStatus, new_status: ItemStatus
    ) -> bool:
        """Compare-and-set the stored status of one item."""

    async def get(self, item_id: str) -> GroceryItemRecord:
        """Read the current stored state of one item."""


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""

    items: t.List[GroceryItemRecord] = field(default_factory=list)
    changed: t.List[GroceryItemRecord] = field(default_factory=list)
    failed: t.List[str] = field(default_factory=list)


class LifecycleReconciler:
    """Flip active/expired statuses to match each item's expiry date.

    Completed items are terminal and never touched. Every transition is
    written through with a compare-and-set, and the pass whose write
    applied publishes exactly one ``item_updated`` event for it.
    """

    store: StatusWriter
    notifier: ChangeNotifier

    def __init__(self, store: StatusWriter, notifier: ChangeNotifier) -> None:
        """Initialize LifecycleReconciler.

        Args:
            store (StatusWriter): Store used for status write-through.
            notifier (ChangeNotifier): Where status changes are published.
        """
        self.store = store
        self.notifier = notifier

    async def reconcile(
        self, items: t.Iterable[GroceryItemRecord], today: date
    ) -> ReconcileResult:
        """Reconcile the stored status of each item against today.

        Args:
            items (Iterable[GroceryItemRecord]): Items as currently stored.
            today (date): The reference day.

        Returns:
            ReconcileResult: The input items in input order with their
                reconciled status, plus the items this pass changed.
                An item deleted while the pass ran is left out.
        """
        result: ReconcileResult = ReconcileResult()

        for item in items:
            if item.status == ItemStatus.COMPLETED:
                result.items.append(item)
                continue

            target: ItemStatus = derive_status(item.expiry_date, today)
            if target == item.status:
                result.items.append(item)
                continue

            async with self.notifier.ordering_lock:
                try:
                    applied: bool = await self.store.set_status(
                        item.id, item.status, target
                    )
                except PersistenceError as exc:
                    LOGGER.error(
                        "Could not move item %s from %s to %s: %s",
                        item.id,
                        item.status.value,
                        target.value,
                        exc,
                    )
                    result.failed.append(item.id)
                    result.items.append(item)
                    continue

                if applied:
                    reconciled: GroceryItemRecord = item.model_copy(
                        update={"status": target}
                    )
                    result.items.append(reconciled)
                    result.changed.append(reconciled)
                    self.notifier.publish(item_updated(reconciled))
                    continue

                # Another writer got there first; report what is stored now
                LOGGER.debug("Item %s changed under this pass", item.id)
                try:
                    result.items.append(await self.store.get(item.id))
                except ItemNotFoundError:
                    LOGGER.debug("Item %s was deleted meanwhile", item.id)
                except PersistenceError as exc:
                    LOGGER.error("Could not re-read item %s: %s", item.id, exc)
                    result.items.append(item)

        if result.changed:
            LOGGER.info(
                "Reconciled %d item statuses", len(result.changed)
            )
        return result
