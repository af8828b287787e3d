"""Tests for the change notifier."""

import asyncio
from datetime import timedelta

from grocerywatch.schemas.notifications import (
    EventType,
    item_added,
    item_deleted,
    items_expiring,
    item_newly_expiring,
)
from grocerywatch.services.notifier import ChangeNotifier


async def test_publish_reaches_every_subscriber(notifier):
    first = notifier.subscribe()
    second = notifier.subscribe()

    delivered = notifier.publish(item_deleted("abc"))

    assert delivered == 2
    assert (await first.get()).item_id == "abc"
    assert (await second.get()).item_id == "abc"


async def test_late_subscriber_gets_no_replay(notifier):
    notifier.publish(item_deleted("before"))
    late = notifier.subscribe()
    notifier.publish(item_deleted("after"))

    assert (await late.get()).item_id == "after"
    assert late.queue.empty()


async def test_events_keep_publish_order(notifier):
    subscription = notifier.subscribe()
    for item_id in ("1", "2", "3"):
        notifier.publish(item_deleted(item_id))

    received = [(await subscription.get()).item_id for _ in range(3)]
    assert received == ["1", "2", "3"]


async def test_full_subscriber_does_not_block_others():
    notifier = ChangeNotifier(max_queue_size=1)
    slow = notifier.subscribe()
    fast = notifier.subscribe()

    notifier.publish(item_deleted("1"))
    await fast.get()
    delivered = notifier.publish(item_deleted("2"))

    assert delivered == 1
    assert slow.dropped == 1
    assert (await fast.get()).item_id == "2"
    assert (await slow.get()).item_id == "1"


async def test_unsubscribe_stops_delivery(notifier):
    subscription = notifier.subscribe()
    notifier.unsubscribe(subscription)
    notifier.unsubscribe(subscription)

    assert notifier.publish(item_deleted("x")) == 0
    assert notifier.subscriber_count == 0
    assert not subscription.offer(item_deleted("y"))


async def test_connect_context_unsubscribes_on_exit(notifier):
    async with notifier.connect():
        assert notifier.subscriber_count == 1
    assert notifier.subscriber_count == 0


async def test_iteration_ends_after_close(notifier):
    subscription = notifier.subscribe()
    notifier.publish(item_deleted("last"))
    notifier.unsubscribe(subscription)

    received = [event.item_id async for event in subscription]
    assert received == ["last"]


async def test_unsubscribe_while_publishing(notifier):
    subscriptions = [notifier.subscribe() for _ in range(3)]

    async def consume(subscription):
        await subscription.get()
        notifier.unsubscribe(subscription)

    consumers = [
        asyncio.create_task(consume(subscription))
        for subscription in subscriptions
    ]
    await asyncio.sleep(0)
    assert notifier.publish(item_deleted("x")) == 3
    await asyncio.gather(*consumers)
    assert notifier.subscriber_count == 0


def test_envelope_shapes(day, make_record):
    item = make_record(day + timedelta(days=1), product_name="Bread")

    added = item_added(item).to_message()
    assert added["type"] == "item_added"
    assert added["item"]["productName"] == "Bread"
    assert added["item"]["expiryDate"] == "2025-06-16"
    assert added["item"]["status"] == "active"
    assert "items" not in added
    assert "itemId" not in added

    assert item_deleted("abc").to_message() == {
        "type": "item_deleted",
        "itemId": "abc",
    }

    batch = items_expiring([item], 3).to_message()
    assert batch["type"] == EventType.ITEMS_EXPIRING.value
    assert len(batch["items"]) == 1
    assert batch["message"] == "1 items are expiring within 3 days!"

    newly = item_newly_expiring(item).to_message()
    assert newly["type"] == "item_newly_expiring"
    assert "Bread" in newly["message"]
