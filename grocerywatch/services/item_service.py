"""Item service - business logic for grocery item operations."""

import logging
import typing as t
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from grocerywatch.core.config import SETTINGS
from grocerywatch.core.models import ItemCategory, ItemStatus
from grocerywatch.schemas.grocery_item import (
    ExpiringItemsResponse,
    GroceryItemCreate,
    GroceryItemListResponse,
    GroceryItemRecord,
    GroceryItemResponse,
    GroceryItemUpdate,
)
from grocerywatch.schemas.notifications import (
    item_added,
    item_deleted,
    item_newly_expiring,
    item_updated,
)
from grocerywatch.services.expiry_classifier import (
    ExpiryVerdict,
    classify,
    expiring_soon,
)
from grocerywatch.services.item_store import ItemNotFoundError, ItemStore
from grocerywatch.services.notifier import ChangeNotifier
from grocerywatch.services.reconciler import (
    LifecycleReconciler,
    ReconcileResult,
)
from grocerywatch.utils.dates import today

LOGGER: logging.Logger = logging.getLogger(__name__)


def to_response(item: GroceryItemRecord, on_day: date) -> GroceryItemResponse:
    """Attach the date-derived expiry fields to a stored item.

    Args:
        item (GroceryItemRecord): The stored item.
        on_day (date): The reference day.

    Returns:
        GroceryItemResponse: The item response schema.
    """
    verdict: ExpiryVerdict = classify(item.expiry_date, on_day)
    return GroceryItemResponse(
        **item.model_dump(),
        days_until_expiry=verdict.days_until_expiry,
        urgency=verdict.urgency,
    )


class ItemService:
    """Service class for grocery item operations."""

    db: AsyncSession
    store: ItemStore
    notifier: ChangeNotifier
    reconciler: LifecycleReconciler

    def __init__(self, db: AsyncSession, notifier: ChangeNotifier) -> None:
        """Initialize ItemService.

        Args:
            db (AsyncSession): The database session.
            notifier (ChangeNotifier): Where item changes are published.
        """
        self.db = db
        self.store = ItemStore(db)
        self.notifier = notifier
        self.reconciler = LifecycleReconciler(self.store, notifier)

    async def reconcile_all(self, on_day: date | None = None) -> ReconcileResult:
        """Reconcile every stored item against the given day.

        Args:
            on_day (date | None): The reference day, defaults to today.

        Returns:
            ReconcileResult: Reconciled items, newest first.
        """
        return await self.reconciler.reconcile(
            await self.store.list_all(), on_day or today()
        )

    async def list_items(
        self,
        status: ItemStatus | None = None,
        category: ItemCategory | None = None,
        on_day: date | None = None,
    ) -> GroceryItemListResponse:
        """List items after bringing their statuses up to date.

        Args:
            status (ItemStatus | None): Only items with this status.
            category (ItemCategory | None): Only items in this category.
            on_day (date | None): The reference day, defaults to today.

        Returns:
            GroceryItemListResponse: Items in reverse creation order.
        """
        reference: date = on_day or today()
        reconciled: ReconcileResult = await self.reconcile_all(reference)

        items: t.List[GroceryItemResponse] = [
            to_response(item, reference)
            for item in reconciled.items
            if (status is None or item.status == status)
            and (category is None or item.category == category)
        ]
        return GroceryItemListResponse(items=items, total=len(items))

    async def get_item(
        self, item_id: str, on_day: date | None = None
    ) -> GroceryItemResponse:
        """Get a specific grocery item by ID, reconciling its status first.

        Args:
            item_id (str): The ID of the grocery item.
            on_day (date | None): The reference day, defaults to today.

        Returns:
            GroceryItemResponse: The grocery item response schema.
        """
        reference: date = on_day or today()
        reconciled: ReconcileResult = await self.reconciler.reconcile(
            [await self.store.get(item_id)], reference
        )
        if not reconciled.items:
            raise ItemNotFoundError(item_id)
        return to_response(reconciled.items[0], reference)

    async def expiring_items(
        self, window_days: int | None = None, on_day: date | None = None
    ) -> ExpiringItemsResponse:
        """Active items expiring within the window, soonest first.

        Nothing is written or published.

        Args:
            window_days (int | None): Lookahead window in days.
            on_day (date | None): The reference day, defaults to today.

        Returns:
            ExpiringItemsResponse: The expiring-soon view.
        """
        reference: date = on_day or today()
        window: int = (
            SETTINGS.expiring_window_days
            if window_days is None
            else window_days
        )
        items: t.List[GroceryItemRecord] = expiring_soon(
            reversed(await self.store.list_all()), reference, window
        )
        return ExpiringItemsResponse(
            items=[to_response(item, reference) for item in items],
            total=len(items),
            window_days=window,
        )

    async def create_item(
        self, item_data: GroceryItemCreate, on_day: date | None = None
    ) -> GroceryItemResponse:
        """Create a new grocery item and announce it.

        Args:
            item_data (GroceryItemCreate): The item data.
            on_day (date | None): The creation day, defaults to today.

        Returns:
            GroceryItemResponse: The created grocery item.
        """
        reference: date = on_day or today()

        async with self.notifier.ordering_lock:
            created: GroceryItemRecord = await self.store.create(
                product_name=item_data.product_name,
                category=item_data.category,
                quantity=item_data.quantity,
                expiry_date=item_data.expiry_date,
                on_day=reference,
            )
            self.notifier.publish(item_added(created))
            if expiring_soon(
                [created], reference, SETTINGS.expiring_window_days
            ):
                self.notifier.publish(item_newly_expiring(created))

        LOGGER.info(
            'Added "%s" (x%d), expires %s',
            created.product_name,
            created.quantity,
            created.expiry_date.isoformat(),
        )
        return to_response(created, reference)

    async def update_item(
        self,
        item_id: str,
        item_data: GroceryItemUpdate,
        on_day: date | None = None,
    ) -> GroceryItemResponse:
        """Update an existing grocery item.

        Args:
            item_id (str): The ID of the item to update.
            item_data (GroceryItemUpdate): Fields to change.
            on_day (date | None): The day of the change, defaults to today.

        Returns:
            GroceryItemResponse: The updated grocery item.
        """
        return await self._apply_patch(
            item_id, item_data.model_dump(exclude_unset=True), on_day
        )

    async def consume_item(
        self, item_id: str, on_day: date | None = None
    ) -> GroceryItemResponse:
        """Mark an item as used up.

        Args:
            item_id (str): The ID of the item.
            on_day (date | None): The completion day, defaults to today.

        Returns:
            GroceryItemResponse: The completed grocery item.
        """
        return await self._apply_patch(
            item_id, {"status": ItemStatus.COMPLETED}, on_day
        )

    async def reactivate_item(
        self, item_id: str, on_day: date | None = None
    ) -> GroceryItemResponse:
        """Return a completed item to the inventory.

        The status becomes active or expired depending on its expiry date.

        Args:
            item_id (str): The ID of the item.
            on_day (date | None): The day of the change, defaults to today.

        Returns:
            GroceryItemResponse: The reactivated grocery item.
        """
        return await self._apply_patch(
            item_id, {"status": ItemStatus.ACTIVE}, on_day
        )

    async def _apply_patch(
        self,
        item_id: str,
        patch: t.Mapping[str, t.Any],
        on_day: date | None,
    ) -> GroceryItemResponse:
        reference: date = on_day or today()
        async with self.notifier.ordering_lock:
            updated: GroceryItemRecord = await self.store.update(
                item_id, patch, on_day=reference
            )
            self.notifier.publish(item_updated(updated))
        return to_response(updated, reference)

    async def delete_item(self, item_id: str) -> None:
        """Delete a grocery item and announce it.

        Args:
            item_id (str): The ID of the item to delete.
        """
        async with self.notifier.ordering_lock:
            await self.store.delete(item_id)
            self.notifier.publish(item_deleted(item_id))
        LOGGER.info("Deleted item %s", item_id)

    async def count_items(self) -> int:
        """Count stored items.

        Returns:
            int: The number of items.
        """
        return await self.store.count()
