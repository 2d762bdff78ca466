# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-25
# Description: feed router
# -----------------------------------------------------------------------------
import asyncio
import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from api.dependencies import get_feed_service
from api.schemas.feed import FeedResponse
from services.EmojiFeedService import EmojiFeedService
from settings import FEED_KEEPALIVE_SECONDS
from utility.errors import EmojifyError, EmojiValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feed", tags=["feed"])


def sse(event: str, data: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


async def feed_event_stream(
    svc: EmojiFeedService,
    is_disconnected: Callable[[], Awaitable[bool]],
    *,
    keepalive: float = FEED_KEEPALIVE_SECONDS,
) -> AsyncIterator[str]:
    """SSE body: one 'subscribed' event, then an 'insert' event per new record."""
    async with svc.subscribe() as sub:
        yield sse("subscribed", {})
        while True:
            if await is_disconnected():
                logger.info("Feed client disconnected")
                break
            try:
                record = await asyncio.wait_for(sub.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue
            if record is None:
                break
            yield sse("insert", record.to_dict())


@router.get("", response_model=FeedResponse)
def get_feed(
    limit: Optional[str] = Query(None),
    svc: EmojiFeedService = Depends(get_feed_service),
) -> Dict[str, Any]:
    try:
        return svc.recent(limit)
    except EmojiValidationError as e:
        raise HTTPException(status_code=400, detail=e.to_payload())
    except EmojifyError as e:
        logger.exception("Feed load error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load feed")


@router.get("/stream")
async def stream_feed(
    request: Request,
    svc: EmojiFeedService = Depends(get_feed_service),
) -> StreamingResponse:
    logger.info("GET /feed/stream opened")
    return StreamingResponse(
        feed_event_stream(svc, request.is_disconnected),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
