# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-23
# Updated: 2026-10-19
# Description: EmojiFeedReconciler
# -----------------------------------------------------------------------------
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import (
    Any,
    AsyncContextManager,
    AsyncIterator,
    Callable,
    Iterable,
    List,
    Optional,
    Protocol,
    Set,
)

from feed.EmojiFeedClient import EVENT_INSERT, EVENT_SUBSCRIBED, FeedEvent
from record.EmojiRecord import EmojiRecord
from settings import FEED_INITIAL_LIMIT
from utility.logging_utils import get_class_logger


class FeedStatus(str, Enum):
    CONNECTING = "connecting"
    SUBSCRIBED = "subscribed"
    ERROR = "error"
    CLOSED = "closed"


class FeedSource(Protocol):
    async def load_recent(self, limit: int = FEED_INITIAL_LIMIT) -> List[EmojiRecord]:
        ...

    def subscribe(self) -> AsyncContextManager[AsyncIterator[FeedEvent]]:
        ...


def _newest_first(records: Iterable[EmojiRecord]) -> List[EmojiRecord]:
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)


class EmojiFeedReconciler:
    """
    Client-side ordered collection for the live feed.

    One bulk load and one insert subscription run side by side; whichever
    lands first, the result is a single newest-first list with one entry per id.
    """

    def __init__(
            self,
            source: FeedSource,
            *,
            initial_limit: int = FEED_INITIAL_LIMIT,
            on_status: Optional[Callable[[FeedStatus], Any]] = None,
            logger: logging.Logger | None = None,
    ) -> None:
        self.source = source
        self.initial_limit = initial_limit
        self.on_status = on_status
        self.logger = logger or get_class_logger(self.__class__)

        self._records: List[EmojiRecord] = []
        self._ids: Set[str] = set()
        self.status = FeedStatus.CONNECTING
        self.last_update: Optional[datetime] = None
        self.last_error: Optional[BaseException] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def records(self) -> List[EmojiRecord]:
        return list(self._records)

    def _set_status(self, status: FeedStatus) -> None:
        if status == self.status:
            return
        self.logger.info("feed status: %s -> %s", self.status.value, status.value)
        self.status = status
        if self.on_status is not None:
            try:
                self.on_status(status)
            except Exception as e:
                self.logger.warning("on_status callback failed: %s", e)

    def _touch(self) -> None:
        self.last_update = datetime.now(timezone.utc)

    def merge(self, record: EmojiRecord) -> bool:
        """Prepend a streamed record unless its id is already present."""
        if record.id in self._ids:
            self.logger.debug("merge: duplicate id=%s ignored", record.id)
            return False
        self._ids.add(record.id)
        self._records.insert(0, record)
        self._touch()
        return True

    def seed(self, records: Iterable[EmojiRecord]) -> None:
        """Fold the bulk load into whatever the stream has already delivered."""
        combined = list(self._records)
        seen = set(self._ids)
        for r in records:
            if r.id not in seen:
                seen.add(r.id)
                combined.append(r)
        self._records = _newest_first(combined)
        self._ids = seen
        self._touch()
        self.logger.info("seed: %d record(s) after bulk load", len(self._records))

    async def _load(self) -> None:
        try:
            records = await self.source.load_recent(self.initial_limit)
        except Exception as e:
            # status follows the subscription; a failed bulk load only loses history
            self.last_error = e
            self.logger.error("bulk load failed, stream left running: %s", e)
            return
        self.seed(records)

    async def _follow(self) -> None:
        try:
            async with self.source.subscribe() as events:
                async for event in events:
                    if event.kind == EVENT_SUBSCRIBED:
                        self._set_status(FeedStatus.SUBSCRIBED)
                    elif event.kind == EVENT_INSERT and event.record is not None:
                        self.merge(event.record)
        except Exception as e:
            self.last_error = e
            self.logger.error("feed stream failed (%d record(s) kept): %s", len(self._records), e)
            self._set_status(FeedStatus.ERROR)
            return
        # server ended the stream
        self._set_status(FeedStatus.CLOSED)

    async def run(self) -> None:
        """
        Bulk load and subscription run as separate tasks and never cancel each other.
        Returns once both are finished; close() is the only thing that stops them early.
        """
        self._set_status(FeedStatus.CONNECTING)
        load = asyncio.ensure_future(self._load())
        follow = asyncio.ensure_future(self._follow())
        try:
            await asyncio.gather(load, follow)
        finally:
            for t in (load, follow):
                if not t.done():
                    t.cancel()
            await asyncio.gather(load, follow, return_exceptions=True)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def close(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._set_status(FeedStatus.CLOSED)

    async def __aenter__(self) -> "EmojiFeedReconciler":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
