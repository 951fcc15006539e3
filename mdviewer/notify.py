"""Change-notification fan-out to connected subscribers."""

from __future__ import annotations

import asyncio
import itertools
import threading
from dataclasses import dataclass, field
from typing import Protocol

from .logging_utils import setup_logger
from .models import ChangeEvent

logger = setup_logger("mdviewer.notify")


class Channel(Protocol):
    """Anything a serialized event can be pushed into."""

    @property
    def is_open(self) -> bool: ...

    def send(self, message: str) -> None: ...


_handle_ids = itertools.count(1)


@dataclass(frozen=True)
class Subscription:
    """Handle returned by ``NotificationHub.subscribe``."""

    channel: Channel = field(compare=False)
    id: int = field(default_factory=lambda: next(_handle_ids))


class NotificationHub:
    """Best-effort broadcast of ``ChangeEvent`` messages.

    The subscriber set is guarded by a lock; ``broadcast`` copies it under the
    lock and sends after releasing it. Events are never queued for
    subscribers that connect later.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: dict[int, Subscription] = {}

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, channel: Channel) -> Subscription:
        subscription = Subscription(channel=channel)
        with self._lock:
            self._subscribers[subscription.id] = subscription
        logger.info(f"Subscriber {subscription.id} connected. Total subscribers: {self.subscriber_count}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            removed = self._subscribers.pop(subscription.id, None)
        if removed is not None:
            logger.info(f"Subscriber {subscription.id} disconnected. Total subscribers: {self.subscriber_count}")

    def broadcast(self, event: ChangeEvent) -> int:
        """Send ``event`` to every open subscriber, return how many got it."""
        message = event.model_dump_json(exclude_none=True)
        with self._lock:
            targets = list(self._subscribers.values())

        delivered = 0
        for subscription in targets:
            channel = subscription.channel
            if not channel.is_open:
                continue
            try:
                channel.send(message)
            except Exception as e:
                logger.debug(f"Dropping {event.kind.value} event for subscriber {subscription.id}: {e}")
                continue
            delivered += 1

        logger.debug(f"Broadcast {event.kind.value} {event.path} to {delivered}/{len(targets)} subscribers")
        return delivered

    def close_all(self) -> None:
        with self._lock:
            targets = list(self._subscribers.values())
            self._subscribers.clear()
        for subscription in targets:
            close = getattr(subscription.channel, "close", None)
            if close is not None:
                close()


class QueueChannel:
    """Channel feeding an ``asyncio.Queue`` owned by one event loop.

    ``send`` may be called from any thread; the WebSocket endpoint drains the
    queue with ``get``.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open and not self._loop.is_closed()

    def send(self, message: str) -> None:
        self._loop.call_soon_threadsafe(self._queue.put_nowait, message)

    async def get(self) -> str | None:
        """Next message, or None once the channel has been closed."""
        return await self._queue.get()

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        if not self._loop.is_closed():
            # Wake a pending ``get``
            self._loop.call_soon_threadsafe(self._queue.put_nowait, None)
