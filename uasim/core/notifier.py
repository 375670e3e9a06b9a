"""EventNotifier — synchronous fan-out of events to subscribers.

The notifier keeps no events.  ``notify`` hands the event to every
subscriber in registration order and returns; a subscriber that raises is
logged and counted, and the remaining subscribers still get the event.
Subscribers that talk to the network must queue, not send, inside their
callback so a tick is never blocked on I/O.
"""

from __future__ import annotations

import logging
from typing import Callable

from uasim.domain.event import Event

logger = logging.getLogger(__name__)

Subscriber = Callable[[Event], None]


class NotifierStats:
    """Delivery counters for observability."""

    __slots__ = ("raised_count", "delivered_count", "failed_count")

    def __init__(self) -> None:
        self.raised_count: int = 0
        self.delivered_count: int = 0
        self.failed_count: int = 0

    def to_dict(self) -> dict:
        return {
            "raised_count": self.raised_count,
            "delivered_count": self.delivered_count,
            "failed_count": self.failed_count,
        }


class EventNotifier:
    """Registry of subscribers plus the notify relay.

    Usage:
        notifier = EventNotifier()
        notifier.subscribe(received.append)
        notifier.notify(condition.snapshot())
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self.stats = NotifierStats()

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Remove *subscriber*; unknown subscribers are ignored."""
        try:
            self._subscribers.remove(subscriber)
        except ValueError:
            pass

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def notify(self, event: Event) -> int:
        """Deliver *event* to every subscriber; return how many accepted it."""
        self.stats.raised_count += 1
        delivered = 0
        # Copy so a subscriber may unsubscribe itself during delivery.
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                self.stats.failed_count += 1
                logger.error(
                    "Subscriber %r failed on %s from %s",
                    subscriber,
                    event.event_type.value,
                    event.source_name,
                    exc_info=True,
                )
                continue
            delivered += 1
        self.stats.delivered_count += delivered
        logger.debug(
            "Raised %s from %s (severity=%d) to %d subscriber(s)",
            event.event_type.value,
            event.source_name,
            event.severity,
            delivered,
        )
        return delivered
