"""Tests for the lifecycle reconciler."""

import asyncio
import typing as t
from datetime import timedelta

from grocerywatch.core.models import ItemCategory, ItemStatus
from grocerywatch.schemas.notifications import EventType
from grocerywatch.services import ItemService, ItemStore
from grocerywatch.services.item_store import (
    ItemNotFoundError,
    PersistenceError,
)
from grocerywatch.services.reconciler import LifecycleReconciler


class FakeStatusStore:
    """In-memory compare-and-set store."""

    def __init__(self, items, failing: t.Iterable[str] = ()) -> None:
        self.records = {item.id: item for item in items}
        self.statuses = {item.id: item.status for item in items}
        self.failing = set(failing)
        self.writes: t.List[str] = []

    async def set_status(self, item_id, expected, new_status) -> bool:
        self.writes.append(item_id)
        if item_id in self.failing:
            raise PersistenceError("update item status", "disk full")
        if self.statuses.get(item_id) != expected:
            return False
        self.statuses[item_id] = new_status
        return True

    async def get(self, item_id):
        if item_id not in self.statuses:
            raise ItemNotFoundError(item_id)
        return self.records[item_id].model_copy(
            update={"status": self.statuses[item_id]}
        )


def _drain(subscription):
    events = []
    while not subscription.queue.empty():
        events.append(subscription.queue.get_nowait())
    return events


async def test_flips_past_items_to_expired(day, make_record, notifier):
    stale = make_record(day - timedelta(days=1))
    fresh = make_record(day + timedelta(days=4))
    store = FakeStatusStore([stale, fresh])
    subscription = notifier.subscribe()

    result = await LifecycleReconciler(store, notifier).reconcile(
        [stale, fresh], day
    )

    assert [item.status for item in result.items] == [
        ItemStatus.EXPIRED,
        ItemStatus.ACTIVE,
    ]
    assert [item.id for item in result.changed] == [stale.id]
    assert store.statuses[stale.id] == ItemStatus.EXPIRED
    assert store.writes == [stale.id]

    events = _drain(subscription)
    assert len(events) == 1
    assert events[0].type == EventType.ITEM_UPDATED
    assert events[0].item.status == ItemStatus.EXPIRED


async def test_corrected_date_reactivates(day, make_record, notifier):
    item = make_record(day + timedelta(days=2), status=ItemStatus.EXPIRED)
    store = FakeStatusStore([item])

    result = await LifecycleReconciler(store, notifier).reconcile([item], day)

    assert result.changed[0].status == ItemStatus.ACTIVE
    assert store.statuses[item.id] == ItemStatus.ACTIVE


async def test_expiring_today_stays_active(day, make_record, notifier):
    item = make_record(day)
    store = FakeStatusStore([item])

    result = await LifecycleReconciler(store, notifier).reconcile([item], day)

    assert result.changed == []
    assert store.writes == []


async def test_completed_items_are_never_touched(day, make_record, notifier):
    item = make_record(
        day - timedelta(days=30), status=ItemStatus.COMPLETED
    )
    store = FakeStatusStore([item])

    result = await LifecycleReconciler(store, notifier).reconcile([item], day)

    assert result.items == [item]
    assert result.changed == []
    assert store.writes == []


async def test_second_pass_is_a_no_op(day, make_record, notifier):
    items = [
        make_record(day - timedelta(days=1)),
        make_record(day + timedelta(days=1), status=ItemStatus.EXPIRED),
    ]
    store = FakeStatusStore(items)
    reconciler = LifecycleReconciler(store, notifier)

    first = await reconciler.reconcile(items, day)
    second = await reconciler.reconcile(first.items, day)

    assert second.items == first.items
    assert second.changed == []


async def test_persistence_failure_skips_only_that_item(
    day, make_record, notifier
):
    broken = make_record(day - timedelta(days=1))
    healthy = make_record(day - timedelta(days=2))
    store = FakeStatusStore([broken, healthy], failing=[broken.id])
    subscription = notifier.subscribe()

    result = await LifecycleReconciler(store, notifier).reconcile(
        [broken, healthy], day
    )

    assert result.failed == [broken.id]
    assert result.items[0] == broken
    assert result.items[0].status == ItemStatus.ACTIVE
    assert [item.id for item in result.changed] == [healthy.id]
    assert [event.item.id for event in _drain(subscription)] == [healthy.id]


async def test_lost_race_reports_no_change(day, make_record, notifier):
    item = make_record(day - timedelta(days=1))
    store = FakeStatusStore([item])
    store.statuses[item.id] = ItemStatus.EXPIRED
    subscription = notifier.subscribe()

    result = await LifecycleReconciler(store, notifier).reconcile([item], day)

    assert result.items[0].status == ItemStatus.EXPIRED
    assert result.changed == []
    assert _drain(subscription) == []


async def test_item_consumed_during_pass_reports_stored_status(
    day, make_record, notifier
):
    item = make_record(day - timedelta(days=1))
    store = FakeStatusStore([item])
    store.statuses[item.id] = ItemStatus.COMPLETED
    subscription = notifier.subscribe()

    result = await LifecycleReconciler(store, notifier).reconcile([item], day)

    assert result.items[0].status == ItemStatus.COMPLETED
    assert result.changed == []
    assert _drain(subscription) == []


async def test_item_deleted_during_pass_is_left_out(
    day, make_record, notifier
):
    gone = make_record(day - timedelta(days=1))
    kept = make_record(day + timedelta(days=3))
    store = FakeStatusStore([gone, kept])
    del store.statuses[gone.id]

    result = await LifecycleReconciler(store, notifier).reconcile(
        [gone, kept], day
    )

    assert [item.id for item in result.items] == [kept.id]
    assert result.failed == []


async def test_concurrent_passes_publish_once(
    day, session_maker, notifier
):
    yesterday = day - timedelta(days=1)
    async with session_maker() as setup:
        created = await ItemStore(setup).create(
            "Yogurt",
            ItemCategory.DAIRY,
            2,
            day,
            on_day=yesterday,
        )
    assert created.status == ItemStatus.ACTIVE
    subscription = notifier.subscribe()

    async with session_maker() as first, session_maker() as second:
        results = await asyncio.gather(
            ItemService(first, notifier).reconcile_all(
                day + timedelta(days=1)
            ),
            ItemService(second, notifier).reconcile_all(
                day + timedelta(days=1)
            ),
        )

    assert sum(len(result.changed) for result in results) == 1
    for result in results:
        assert result.items[0].status == ItemStatus.EXPIRED
    events = _drain(subscription)
    assert len(events) == 1
    assert events[0].item.id == created.id

    async with session_maker() as check:
        stored = await ItemStore(check).get(created.id)
    assert stored.status == ItemStatus.EXPIRED
