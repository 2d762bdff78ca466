# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-18
# Description: InsertBroadcaster
# -----------------------------------------------------------------------------
from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from record.EmojiRecord import EmojiRecord
from settings import FEED_SUBSCRIBER_QUEUE_SIZE
from utility.logging_utils import get_class_logger

_CLOSED = object()


class InsertSubscription:
    """
    One subscriber's view of the insert stream.
    Async-iterable; iteration ends once the subscription is closed.
    """

    def __init__(self, sub_id: int, loop: asyncio.AbstractEventLoop, queue_size: int) -> None:
        self.sub_id = sub_id
        self.loop = loop
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self.closed = False
        self.dropped = 0

    async def get(self) -> Optional[EmojiRecord]:
        """Next record, or None once closed."""
        if self.closed and self.queue.empty():
            return None
        item = await self.queue.get()
        if item is _CLOSED:
            self.closed = True
            return None
        return item

    def __aiter__(self) -> "InsertSubscription":
        return self

    async def __anext__(self) -> EmojiRecord:
        item = await self.get()
        if item is None:
            raise StopAsyncIteration
        return item


class InsertBroadcaster:
    """
    In-process fan-out of newly inserted records.

    publish() may be called from any thread (sync FastAPI routes run in the
    threadpool); each subscriber queue is only touched from its own event loop.
    """

    def __init__(
            self,
            *,
            queue_size: int = FEED_SUBSCRIBER_QUEUE_SIZE,
            logger: logging.Logger | None = None,
    ) -> None:
        self.queue_size = queue_size
        self.logger = logger or get_class_logger(self.__class__)
        self._subscribers: Dict[int, InsertSubscription] = {}
        self._lock = threading.Lock()
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, record: EmojiRecord) -> int:
        """Deliver record to every live subscriber. Returns number of subscribers notified."""
        with self._lock:
            subs = list(self._subscribers.values())

        delivered = 0
        for sub in subs:
            try:
                sub.loop.call_soon_threadsafe(self._offer, sub, record)
                delivered += 1
            except RuntimeError as e:
                # subscriber's loop has gone away without unsubscribing
                self.logger.warning("publish: dropping subscriber %d (%s)", sub.sub_id, e)
                self._remove(sub.sub_id)

        self.logger.debug("publish: record id=%s -> %d subscriber(s)", record.id, delivered)
        return delivered

    def _offer(self, sub: InsertSubscription, record: EmojiRecord) -> None:
        try:
            sub.queue.put_nowait(record)
        except asyncio.QueueFull:
            sub.dropped += 1
            self.logger.warning(
                "Subscriber %d queue full; dropped record id=%s (dropped=%d)",
                sub.sub_id, record.id, sub.dropped,
            )

    def _remove(self, sub_id: int) -> Optional[InsertSubscription]:
        with self._lock:
            return self._subscribers.pop(sub_id, None)

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[InsertSubscription]:
        """Register a subscriber bound to the running loop; always unregistered on exit."""
        sub = InsertSubscription(next(self._ids), asyncio.get_running_loop(), self.queue_size)
        with self._lock:
            self._subscribers[sub.sub_id] = sub
        self.logger.info("subscribe: subscriber %d registered (total=%d)", sub.sub_id, self.subscriber_count)

        try:
            yield sub
        finally:
            self._remove(sub.sub_id)
            sub.closed = True
            self.logger.info("subscribe: subscriber %d released (total=%d)", sub.sub_id, self.subscriber_count)

    def close_all(self) -> None:
        """Wake every subscriber with an end-of-stream marker (used on shutdown)."""
        with self._lock:
            subs = list(self._subscribers.values())
        for sub in subs:
            try:
                sub.loop.call_soon_threadsafe(self._close_sub, sub)
            except RuntimeError:
                self._remove(sub.sub_id)

    @staticmethod
    def _close_sub(sub: InsertSubscription) -> None:
        try:
            sub.queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            sub.closed = True
