# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-23
# Description: EmojiFeedClient
# -----------------------------------------------------------------------------
from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional

import httpx

from record.EmojiRecord import EmojiRecord
from settings import FEED_INITIAL_LIMIT
from utility.logging_utils import get_class_logger

EVENT_SUBSCRIBED = "subscribed"
EVENT_INSERT = "insert"


@dataclass(frozen=True)
class FeedEvent:
    kind: str
    record: Optional[EmojiRecord] = None


def parse_sse_event(event: str, data_lines: List[str]) -> Optional[FeedEvent]:
    """One dispatched SSE block -> FeedEvent (None for event types we don't know)."""
    kind = event or "message"
    if kind == EVENT_SUBSCRIBED:
        return FeedEvent(kind=EVENT_SUBSCRIBED)
    if kind == EVENT_INSERT:
        payload = json.loads("\n".join(data_lines))
        return FeedEvent(kind=EVENT_INSERT, record=EmojiRecord.from_dict(payload))
    return None


async def iter_sse_events(lines: AsyncIterator[str]) -> AsyncIterator[FeedEvent]:
    event = ""
    data: List[str] = []
    async for raw in lines:
        line = raw.rstrip("\r")
        if line == "":
            if event or data:
                parsed = parse_sse_event(event, data)
                if parsed is not None:
                    yield parsed
            event, data = "", []
            continue
        if line.startswith(":"):
            # keepalive comment
            continue
        name, _, value = line.partition(":")
        value = value[1:] if value.startswith(" ") else value
        if name == "event":
            event = value
        elif name == "data":
            data.append(value)


class EmojiFeedClient:
    """
    HTTP side of the live feed, as seen by a UI session:
      - load_recent(): GET /feed
      - subscribe():   GET /feed/stream (Server-Sent Events)
    """

    def __init__(
            self,
            base_url: str,
            *,
            client: httpx.AsyncClient | None = None,
            timeout: float = 10.0,
            logger: logging.Logger | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.logger = logger or get_class_logger(self.__class__)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def load_recent(self, limit: int = FEED_INITIAL_LIMIT) -> List[EmojiRecord]:
        resp = await self.client.get(f"{self.base_url}/feed", params={"limit": limit})
        resp.raise_for_status()
        body = resp.json()
        records = [EmojiRecord.from_dict(r) for r in body.get("records", [])]
        self.logger.info("load_recent: limit=%d -> %d record(s)", limit, len(records))
        return records

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[AsyncIterator[FeedEvent]]:
        # no read timeout: the server only sends keepalives every few seconds
        timeout = httpx.Timeout(self.client.timeout.connect, read=None)
        async with self.client.stream(
                "GET",
                f"{self.base_url}/feed/stream",
                headers={"Accept": "text/event-stream"},
                timeout=timeout,
        ) as resp:
            resp.raise_for_status()
            self.logger.info("subscribe: stream opened (%s)", resp.url)
            try:
                yield iter_sse_events(resp.aiter_lines())
            finally:
                self.logger.info("subscribe: stream released")

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
