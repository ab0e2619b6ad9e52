"""Typed in-process publish/subscribe channel.

Each subscriber owns a bounded ``asyncio.Queue``. Publishing never blocks:
when a subscriber's queue is full the message is dropped for that
subscriber only, with a warning and a per-subscription counter. Must be
used from the event loop thread.
"""

from __future__ import annotations

import asyncio
from typing import Generic, TypeVar

from ..logging import logger

T = TypeVar("T")

_CLOSED = object()


class Subscription(Generic[T]):
    """Handle returned by :meth:`Channel.subscribe`; iterate it or call :meth:`get`."""

    def __init__(self, channel: Channel[T], maxsize: int) -> None:
        self._channel = channel
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def pending(self) -> int:
        return self._queue.qsize()

    def _offer(self, item: T) -> bool:
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            self.dropped += 1
            return False
        return True

    async def get(self) -> T:
        if self._closed and self._queue.empty():
            raise EOFError(f"subscription to {self._channel.name} closed")
        item = await self._queue.get()
        if item is _CLOSED:
            raise EOFError(f"subscription to {self._channel.name} closed")
        return item

    def get_nowait(self) -> T | None:
        try:
            item = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
        return None if item is _CLOSED else item

    def close(self) -> None:
        self._channel.unsubscribe(self)

    def _mark_closed(self) -> None:
        self._closed = True
        try:
            # Wakes a consumer blocked in __anext__; a full queue means it is not blocked
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            pass

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> T:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item


class Channel(Generic[T]):
    """Fan-out of typed messages to independent bounded subscribers."""

    def __init__(self, name: str, default_maxsize: int = 100) -> None:
        self.name = name
        self._default_maxsize = max(1, default_maxsize)
        self._subscriptions: list[Subscription[T]] = []
        self.published = 0
        self.dropped = 0

    def subscribe(self, maxsize: int | None = None) -> Subscription[T]:
        sub: Subscription[T] = Subscription(self, max(1, maxsize or self._default_maxsize))
        self._subscriptions.append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription[T]) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
            subscription._mark_closed()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def publish(self, item: T) -> int:
        """Offer ``item`` to every subscriber. Returns how many accepted it."""
        self.published += 1
        delivered = 0
        for sub in list(self._subscriptions):
            if sub._offer(item):
                delivered += 1
            else:
                self.dropped += 1
                logger.warning(
                    "channel_subscriber_queue_full",
                    channel=self.name,
                    dropped_total=sub.dropped,
                )
        return delivered
