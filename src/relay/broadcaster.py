"""Fan-out of dashboard events to connected observers.

One publisher (the relay state), any number of subscribers. Each subscriber
gets its own unbounded queue; publishing never blocks and never fails.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from src.models import DashboardEvent, DashboardEventType

logger = logging.getLogger(__name__)

Sender = Callable[[dict[str, Any]], Awaitable[None]]


class Subscription:
    """A single observer's mailbox."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue[DashboardEvent] = asyncio.Queue()

    def deliver(self, event: DashboardEvent) -> None:
        self.queue.put_nowait(event)

    async def pump(self, send: Sender) -> None:
        """Forward queued events to ``send`` until it raises."""
        while True:
            event = await self.queue.get()
            await send(event.to_wire())


class Broadcaster:
    """Publish/subscribe hub for dashboard events."""

    def __init__(self) -> None:
        self._subscribers: list[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        subscription = Subscription()
        self._subscribers.append(subscription)
        logger.debug("Dashboard observer connected (total: %d)", self.subscriber_count)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription not in self._subscribers:
            return
        self._subscribers.remove(subscription)
        logger.debug("Dashboard observer disconnected (total: %d)", self.subscriber_count)

    def publish(self, event_type: DashboardEventType, data: Any = None) -> DashboardEvent:
        event = DashboardEvent(event=event_type, data=data)
        for subscription in list(self._subscribers):
            subscription.deliver(event)
        return event
