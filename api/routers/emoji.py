# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-25
# Description: emoji router
# -----------------------------------------------------------------------------
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from api.dependencies import get_ingest_service
from api.schemas.emoji import UploadResponse
from services.EmojiIngestService import EmojiIngestService
from utility.errors import EmojiValidationError, PersistenceError, UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["emoji"])


@router.post("/emoji", response_model=UploadResponse, response_model_exclude_none=True)
@router.post("/sticker", response_model=UploadResponse, response_model_exclude_none=True)
def create_emoji(
    payload: Dict[str, Any] = Body(...),
    svc: EmojiIngestService = Depends(get_ingest_service),
) -> Dict[str, Any]:
    logger.info("POST upload called (mimeType=%s)", payload.get("mimeType"))
    try:
        record = svc.ingest(payload.get("file"), payload.get("mimeType"))
    except EmojiValidationError as e:
        logger.warning("Upload rejected: %s", e.message)
        raise HTTPException(status_code=400, detail=e.to_payload())
    except PersistenceError as e:
        logger.exception("Database error: %s", e)
        raise HTTPException(status_code=500, detail="Failed to save emoji")
    except UpstreamError as e:
        logger.exception("Upload error: %s", e)
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"success": True, svc.response_key: record.to_dict()}
