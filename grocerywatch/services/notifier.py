"""In-process fan-out of change notifications to connected subscribers."""

import asyncio
import logging
import typing as t
from contextlib import asynccontextmanager

from grocerywatch.schemas.notifications import NotificationEvent

LOGGER: logging.Logger = logging.getLogger(__name__)


class Subscription:
    """A single subscriber's bounded queue of pending events."""

    queue: asyncio.Queue[NotificationEvent]
    closed: bool
    dropped: int

    def __init__(self, max_queue_size: int) -> None:
        """Initialize Subscription.

        Args:
            max_queue_size (int): Events buffered before new ones are dropped.
        """
        self.queue = asyncio.Queue(maxsize=max_queue_size)
        self.closed = False
        self.dropped = 0

    def offer(self, event: NotificationEvent) -> bool:
        """Enqueue an event without waiting.

        Args:
            event (NotificationEvent): The event to deliver.

        Returns:
            bool: False if the subscription is closed or its queue is full.
        """
        if self.closed:
            return False
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            return False
        return True

    async def get(self) -> NotificationEvent:
        """Wait for the next event."""
        return await self.queue.get()

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> NotificationEvent:
        if self.closed and self.queue.empty():
            raise StopAsyncIteration
        return await self.queue.get()


class ChangeNotifier:
    """Broadcast item change events to every connected subscriber.

    Delivery is best-effort and at-most-once per subscriber that is
    connected at publish time. There is no replay for late joiners.
    """

    max_queue_size: int
    ordering_lock: asyncio.Lock
    _subscribers: t.Set[Subscription]

    def __init__(self, max_queue_size: int = 100) -> None:
        """Initialize ChangeNotifier.

        Args:
            max_queue_size (int): Per-subscriber queue bound.
        """
        self.max_queue_size = max_queue_size
        # Held across commit and publish so delivery follows commit order.
        self.ordering_lock = asyncio.Lock()
        self._subscribers = set()

    @property
    def subscriber_count(self) -> int:
        """Number of currently connected subscribers."""
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        """Register a new subscriber.

        Returns:
            Subscription: The subscriber's event stream.
        """
        subscription: Subscription = Subscription(self.max_queue_size)
        self._subscribers.add(subscription)
        LOGGER.info(
            "Subscriber connected (%d connected)", self.subscriber_count
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscriber; unknown subscriptions are ignored.

        Args:
            subscription (Subscription): The subscription to close.
        """
        subscription.closed = True
        if subscription in self._subscribers:
            self._subscribers.discard(subscription)
            LOGGER.info(
                "Subscriber disconnected (%d connected)",
                self.subscriber_count,
            )

    @asynccontextmanager
    async def connect(self) -> t.AsyncIterator[Subscription]:
        """Subscribe for the duration of the ``async with`` block."""
        subscription: Subscription = self.subscribe()
        try:
            yield subscription
        finally:
            self.unsubscribe(subscription)

    def publish(self, event: NotificationEvent) -> int:
        """Deliver an event to every connected subscriber without blocking.

        A subscriber whose queue is full or closed misses this event; the
        others are unaffected.

        Args:
            event (NotificationEvent): The event to broadcast.

        Returns:
            int: Number of subscribers the event was queued for.
        """
        delivered: int = 0
        for subscription in list(self._subscribers):
            if subscription.offer(event):
                delivered += 1
            else:
                LOGGER.warning(
                    "Dropped %s event for a slow or closed subscriber",
                    event.type.value,
                )
        LOGGER.debug(
            "Published %s to %d subscribers", event.type.value, delivered
        )
        return delivered
