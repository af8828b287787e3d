"""Item store - durable grocery item records keyed by identifier."""

import logging
import typing as t
from contextlib import asynccontextmanager
from datetime import date

from sqlalchemy import Select, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grocerywatch.core.models import GroceryItem, ItemCategory, ItemStatus
from grocerywatch.schemas.grocery_item import GroceryItemRecord
from grocerywatch.services.expiry_classifier import derive_status
from grocerywatch.utils.dates import InvalidDateError, parse_date, today

LOGGER: logging.Logger = logging.getLogger(__name__)


class ItemNotFoundError(Exception):
    """Raised when an item is not found."""

    item_id: str

    def __init__(self, item_id: str) -> None:
        """Initialize ItemNotFoundError.

        Args:
            item_id (str): The ID that was looked up.
        """
        self.item_id = item_id
        super().__init__(f"Grocery item with ID {item_id} not found")


class ItemValidationError(Exception):
    """Raised when item fields are missing or out of range."""

    field: str

    def __init__(self, field: str, reason: str) -> None:
        """Initialize ItemValidationError.

        Args:
            field (str): The offending field.
            reason (str): Human readable reason.
        """
        self.field = field
        super().__init__(f"Invalid {field}: {reason}")


class PersistenceError(Exception):
    """Raised when the storage layer fails to read or write."""

    operation: str

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize PersistenceError.

        Args:
            operation (str): The store operation that failed.
            reason (str): The underlying storage error.
        """
        self.operation = operation
        super().__init__(f"Failed to {operation}: {reason}")


def validate_product_name(value: t.Any) -> str:
    """Return the trimmed product name or raise ItemValidationError."""
    if not isinstance(value, str) or not value.strip():
        raise ItemValidationError("productName", "must be a non-empty string")
    return value.strip()


def validate_category(value: t.Any) -> ItemCategory:
    """Return the category enum member or raise ItemValidationError."""
    try:
        return ItemCategory(value)
    except ValueError as exc:
        allowed: str = ", ".join(c.value for c in ItemCategory)
        raise ItemValidationError(
            "category", f"{value!r} is not one of {allowed}"
        ) from exc


def validate_quantity(value: t.Any) -> int:
    """Return the quantity or raise ItemValidationError."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ItemValidationError("quantity", "must be an integer >= 1")
    return value


def validate_expiry_date(value: t.Any) -> date:
    """Return the parsed expiry date or raise ItemValidationError."""
    try:
        return parse_date(value)
    except InvalidDateError as exc:
        raise ItemValidationError("expiryDate", str(exc)) from exc


def validate_status(value: t.Any) -> ItemStatus:
    """Return the status enum member or raise ItemValidationError."""
    try:
        return ItemStatus(value)
    except ValueError as exc:
        raise ItemValidationError(
            "status", f"{value!r} is not a valid status"
        ) from exc


FIELD_VALIDATORS: t.Dict[str, t.Callable[[t.Any], t.Any]] = {
    "product_name": validate_product_name,
    "category": validate_category,
    "quantity": validate_quantity,
    "expiry_date": validate_expiry_date,
    "status": validate_status,
}

PATCHABLE_FIELDS: t.FrozenSet[str] = frozenset(FIELD_VALIDATORS)


class ItemStore:
    """SQL-backed store for grocery items."""

    db: AsyncSession

    def __init__(self, db: AsyncSession) -> None:
        """Initialize ItemStore.

        Args:
            db (AsyncSession): The database session.
        """
        self.db = db

    @staticmethod
    def to_record(item: GroceryItem) -> GroceryItemRecord:
        """Convert a GroceryItem model to its persisted record schema.

        Args:
            item (GroceryItem): The grocery item model.

        Returns:
            GroceryItemRecord: A detached snapshot of the item.
        """
        return GroceryItemRecord.model_validate(item)

    @asynccontextmanager
    async def _write(self, operation: str) -> t.AsyncIterator[None]:
        """Commit the enclosed changes, mapping storage errors.

        Args:
            operation (str): Description used in the error message.

        Raises:
            PersistenceError: If flushing or committing fails.
        """
        try:
            yield
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            LOGGER.error("Storage failure during %s: %s", operation, exc)
            raise PersistenceError(operation, str(exc)) from exc

    async def _get_model(self, item_id: str) -> GroceryItem:
        try:
            item: GroceryItem | None = (
                await self.db.execute(
                    select(GroceryItem)
                    .where(GroceryItem.id == item_id)
                    .execution_options(populate_existing=True)
                )
            ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError("load item", str(exc)) from exc

        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    async def _fetch(
        self, query: Select[t.Tuple[GroceryItem]], operation: str
    ) -> t.List[GroceryItemRecord]:
        # Status writes bypass the identity map, so reload loaded rows
        query = query.execution_options(populate_existing=True)
        try:
            items: t.Sequence[GroceryItem] = (
                (await self.db.execute(query)).scalars().all()
            )
        except SQLAlchemyError as exc:
            raise PersistenceError(operation, str(exc)) from exc
        return [self.to_record(item) for item in items]

    async def get(self, item_id: str) -> GroceryItemRecord:
        """Get a specific grocery item by ID.

        Args:
            item_id (str): The ID of the grocery item.

        Returns:
            GroceryItemRecord: The stored item.
        """
        return self.to_record(await self._get_model(item_id))

    async def list_all(self) -> t.List[GroceryItemRecord]:
        """List every item, newest first.

        Returns:
            List[GroceryItemRecord]: All items in reverse creation order.
        """
        return await self._fetch(
            select(GroceryItem).order_by(
                GroceryItem.created_at.desc(), GroceryItem.id.desc()
            ),
            "list items",
        )

    async def list_by_status(
        self, status: ItemStatus
    ) -> t.List[GroceryItemRecord]:
        """List items whose stored status matches.

        Args:
            status (ItemStatus): The stored status to match.

        Returns:
            List[GroceryItemRecord]: Matching items, newest first.
        """
        return await self._fetch(
            select(GroceryItem)
            .where(GroceryItem.status == status)
            .order_by(GroceryItem.created_at.desc(), GroceryItem.id.desc()),
            f"list {status.value} items",
        )

    async def count(self) -> int:
        """Count stored items.

        Returns:
            int: The number of items.
        """
        try:
            return (
                await self.db.execute(
                    select(func.count())  # pylint: disable=not-callable
                    .select_from(GroceryItem)
                )
            ).scalar() or 0
        except SQLAlchemyError as exc:
            raise PersistenceError("count items", str(exc)) from exc

    async def create(  # pylint: disable=too-many-arguments,too-many-positional-arguments,line-too-long  # noqa: E501
        self,
        product_name: str,
        category: ItemCategory | str,
        quantity: int,
        expiry_date: date | str,
        on_day: date | None = None,
    ) -> GroceryItemRecord:
        """Create a new grocery item.

        The purchase date is the creation day and the initial status is
        derived from the expiry date, so an item entered with a past
        expiry date is stored as expired.

        Args:
            product_name (str): The product name.
            category (ItemCategory | str): The item category.
            quantity (int): Number of units, at least 1.
            expiry_date (date | str): The expiry date.
            on_day (date | None): Creation day, defaults to today.

        Raises:
            ItemValidationError: If any field is invalid.

        Returns:
            GroceryItemRecord: The stored item.
        """
        created_on: date = on_day or today()
        parsed_expiry: date = validate_expiry_date(expiry_date)

        new_item: GroceryItem = GroceryItem(
            product_name=validate_product_name(product_name),
            category=validate_category(category),
            quantity=validate_quantity(quantity),
            purchase_date=created_on,
            expiry_date=parsed_expiry,
            status=derive_status(parsed_expiry, created_on),
            completed_date=None,
        )

        async with self._write("create item"):
            self.db.add(new_item)
            await self.db.flush()
            await self.db.refresh(new_item)

        if new_item.status == ItemStatus.EXPIRED:
            LOGGER.info(
                'New item "%s" is already expired', new_item.product_name
            )
        return self.to_record(new_item)

    async def update(
        self,
        item_id: str,
        patch: t.Mapping[str, t.Any],
        on_day: date | None = None,
    ) -> GroceryItemRecord:
        """Apply a partial update to an existing item.

        Explicitly setting ``completed`` always wins and stamps the
        completion day. Any other status change, or an expiry date change
        on a non-completed item, re-derives active/expired from the date
        and clears the completion day.

        Args:
            item_id (str): The ID of the item to update.
            patch (Mapping[str, Any]): Field names mapped to new values;
                ``None`` values are ignored.
            on_day (date | None): Day of the change, defaults to today.

        Raises:
            ItemNotFoundError: If the item does not exist.
            ItemValidationError: If a patched field is invalid.

        Returns:
            GroceryItemRecord: The updated item.
        """
        changed_on: date = on_day or today()
        fields: t.Dict[str, t.Any] = {
            key: value for key, value in patch.items() if value is not None
        }
        unknown: t.Set[str] = set(fields) - PATCHABLE_FIELDS
        if unknown:
            raise ItemValidationError(
                ", ".join(sorted(unknown)), "field cannot be updated"
            )

        # Validate the whole patch before the loaded row is modified
        validated: t.Dict[str, t.Any] = {
            key: FIELD_VALIDATORS[key](value) for key, value in fields.items()
        }
        requested_status: ItemStatus | None = validated.pop("status", None)
        new_expiry: date | None = validated.pop("expiry_date", None)

        item: GroceryItem = await self._get_model(item_id)
        for key, value in validated.items():
            setattr(item, key, value)

        expiry_changed: bool = False
        if new_expiry is not None:
            expiry_changed = new_expiry != item.expiry_date
            item.expiry_date = new_expiry

        if requested_status == ItemStatus.COMPLETED:
            if item.status != ItemStatus.COMPLETED:
                item.completed_date = changed_on
            item.status = ItemStatus.COMPLETED
        elif requested_status is not None or (
            expiry_changed and item.status != ItemStatus.COMPLETED
        ):
            item.status = derive_status(item.expiry_date, changed_on)
            item.completed_date = None

        async with self._write("update item"):
            await self.db.flush()
            await self.db.refresh(item)

        return self.to_record(item)

    async def delete(self, item_id: str) -> None:
        """Delete a grocery item by ID.

        Args:
            item_id (str): The ID of the item to delete.

        Raises:
            ItemNotFoundError: If the item does not exist.
        """
        item: GroceryItem = await self._get_model(item_id)
        async with self._write("delete item"):
            await self.db.delete(item)

    async def set_status(
        self,
        item_id: str,
        expected: ItemStatus,
        new_status: ItemStatus,
    ) -> bool:
        """Atomically move an item from one status to another.

        The write only applies while the stored status still equals
        ``expected``, so concurrent callers applying the same transition
        cannot interleave.

        Args:
            item_id (str): The ID of the item.
            expected (ItemStatus): The status the caller observed.
            new_status (ItemStatus): The status to store.

        Raises:
            PersistenceError: If the write fails.

        Returns:
            bool: True if this call applied the transition.
        """
        async with self._write("update item status"):
            result = await self.db.execute(
                update(GroceryItem)
                .where(
                    GroceryItem.id == item_id,
                    GroceryItem.status == expected,
                )
                .values(status=new_status)
                .execution_options(synchronize_session=False)
            )
        return bool(result.rowcount == 1)
