"""In-process change feed with per-user subscriptions.

Task mutations are published here after they commit; every mounted view
session for the same user receives them through its own bounded queue.

Example:
    feed = ChangeFeed(queue_size=100)
    subscription = feed.subscribe("user-1")
    try:
        async for event in subscription:
            ...
    finally:
        feed.unsubscribe(subscription)
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Self
from uuid import uuid4

from taskboard_service.infra.metrics.prometheus import (
    change_feed_dropped_total,
    change_feed_events_total,
)

if TYPE_CHECKING:
    from taskboard_service.core.events import DomainEvent

logger = logging.getLogger(__name__)


class ChangeFeedClosedError(RuntimeError):
    """Raised when subscribing to a feed that has been shut down."""


class Subscription:
    """A single consumer's view of the feed.

    Iterating yields events in publish order until the subscription is
    closed. A full queue drops its oldest event so publishers never block.
    """

    def __init__(self, user_id: str, queue_size: int) -> None:
        self.id = str(uuid4())
        self.user_id = user_id
        self._queue: asyncio.Queue[DomainEvent | None] = asyncio.Queue(maxsize=queue_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, event: DomainEvent) -> bool:
        """Enqueue ``event``; returns False if an older event had to be dropped."""
        if self._closed:
            return True
        dropped = False
        if self._queue.full():
            with contextlib.suppress(asyncio.QueueEmpty):
                self._queue.get_nowait()
            dropped = True
        self._queue.put_nowait(event)
        return not dropped

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._queue.full():
            with contextlib.suppress(asyncio.QueueEmpty):
                self._queue.get_nowait()
        self._queue.put_nowait(None)

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> DomainEvent:
        item = await self._queue.get()
        if item is None:
            raise StopAsyncIteration
        return item


class ChangeFeed:
    """Per-user publish/subscribe fan-out."""

    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._subscriptions: dict[str, dict[str, Subscription]] = defaultdict(dict)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, user_id: str) -> Subscription:
        """Register a new subscription for ``user_id``.

        Raises:
            ChangeFeedClosedError: The feed has been closed.
        """
        if self._closed:
            raise ChangeFeedClosedError("change feed is closed")
        subscription = Subscription(user_id, self._queue_size)
        self._subscriptions[user_id][subscription.id] = subscription
        logger.debug(
            "Change feed subscription opened",
            extra={"user_id": user_id, "subscription_id": subscription.id},
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.close()
        user_subs = self._subscriptions.get(subscription.user_id)
        if user_subs is None:
            return
        user_subs.pop(subscription.id, None)
        if not user_subs:
            del self._subscriptions[subscription.user_id]

    def publish(self, user_id: str, event: DomainEvent) -> int:
        """Deliver ``event`` to every subscription of ``user_id``.

        Returns:
            Number of subscriptions the event was delivered to.
        """
        change_feed_events_total.labels(operation=event.event_type).inc()
        subscriptions = list(self._subscriptions.get(user_id, {}).values())
        for subscription in subscriptions:
            if not subscription.deliver(event):
                change_feed_dropped_total.inc()
                logger.warning(
                    "Change feed subscriber lagging, dropped oldest event",
                    extra={"user_id": user_id, "subscription_id": subscription.id, **event.to_log_extra()},
                )
        return len(subscriptions)

    def subscriber_count(self, user_id: str | None = None) -> int:
        if user_id is not None:
            return len(self._subscriptions.get(user_id, {}))
        return sum(len(subs) for subs in self._subscriptions.values())

    def close(self) -> None:
        """Close every subscription and refuse new ones."""
        self._closed = True
        for user_subs in self._subscriptions.values():
            for subscription in user_subs.values():
                subscription.close()
        self._subscriptions.clear()
        logger.info("Change feed closed")


_feed: ChangeFeed | None = None


def get_change_feed() -> ChangeFeed:
    """Get the process-wide change feed.

    Raises:
        RuntimeError: If start_change_feed() has not been called.
    """
    if _feed is None:
        raise RuntimeError("Change feed not initialized. Call start_change_feed() first.")
    return _feed


def start_change_feed(queue_size: int = 100) -> ChangeFeed:
    """Create the process-wide change feed (idempotent)."""
    global _feed
    if _feed is None or _feed.closed:
        _feed = ChangeFeed(queue_size=queue_size)
        logger.info("Change feed started", extra={"queue_size": queue_size})
    return _feed


def stop_change_feed() -> None:
    global _feed
    if _feed is not None:
        _feed.close()
        _feed = None
