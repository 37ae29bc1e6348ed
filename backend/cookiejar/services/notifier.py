"""
Change notifier — push "reload" signals to open UI surfaces.

After any mutation the router publishes a ChangeEvent. Every subscriber
except the one that caused the change receives it and re-fetches
everything (there are no incremental updates).

Event kinds:
  • data-changed    — after every mutation
  • cookie-deleted  — a cookie left the jar (payload: the cookie)
  • refresh-jar     — the overlay must rebuild its jar (project delete, import)

Delivery never blocks the publisher: each subscriber owns a bounded
queue, and when it is full the oldest event is dropped. A reload signal
is idempotent, so dropping stale ones loses nothing.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from cookiejar.core.config import settings

logger = logging.getLogger(__name__)

DATA_CHANGED = "data-changed"
COOKIE_DELETED = "cookie-deleted"
REFRESH_JAR = "refresh-jar"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """One notification.

    Attributes:
        kind:    One of the event kind constants above.
        payload: Optional JSON-serializable detail.
        origin:  Client id of the surface that caused the change.
    """

    kind: str
    payload: dict[str, Any] | None = None
    origin: str | None = None

    def to_sse(self) -> str:
        """Server-sent-events wire form."""
        data = json.dumps(self.payload if self.payload is not None else {})
        return f"event: {self.kind}\ndata: {data}\n\n"


@dataclass(slots=True)
class _Subscriber:
    client_id: str | None
    queue: asyncio.Queue[ChangeEvent] = field(repr=False)


class ChangeNotifier:
    """In-process fan-out of change events."""

    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[int, _Subscriber] = {}
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @asynccontextmanager
    async def subscription(
        self, client_id: str | None = None,
    ) -> AsyncIterator[asyncio.Queue[ChangeEvent]]:
        """Register for events while the context is open."""
        key = next(self._ids)
        subscriber = _Subscriber(client_id, asyncio.Queue(maxsize=self._queue_size))
        self._subscribers[key] = subscriber
        logger.debug("Observer %s subscribed (client=%s)", key, client_id)
        try:
            yield subscriber.queue
        finally:
            del self._subscribers[key]
            logger.debug("Observer %s unsubscribed", key)

    def publish(
        self,
        kind: str,
        payload: dict[str, Any] | None = None,
        origin: str | None = None,
    ) -> int:
        """Deliver to every other observer. Returns how many received it."""
        event = ChangeEvent(kind=kind, payload=payload, origin=origin)
        delivered = 0
        for subscriber in self._subscribers.values():
            if origin is not None and subscriber.client_id == origin:
                continue
            queue = subscriber.queue
            if queue.full():
                queue.get_nowait()
                logger.warning("Observer queue full (client=%s); dropped oldest event",
                               subscriber.client_id)
            queue.put_nowait(event)
            delivered += 1
        logger.debug("Published %s to %d observer(s)", kind, delivered)
        return delivered


# Singleton — one fan-out point per process
notifier = ChangeNotifier(queue_size=settings.EVENT_QUEUE_SIZE)


def get_notifier() -> ChangeNotifier:
    """FastAPI dependency — the process-wide notifier."""
    return notifier
