# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-25
# Description: search router
# -----------------------------------------------------------------------------
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_search_service
from api.schemas.search import SearchResponse
from services.EmojiSearchService import EmojiSearchService
from utility.errors import EmojifyError, EmojiValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


@router.get("", response_model=SearchResponse)
def search(
    q: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    threshold: Optional[str] = Query(None),
    svc: EmojiSearchService = Depends(get_search_service),
) -> Dict[str, Any]:
    # params stay raw strings here; the service owns validation
    try:
        return svc.search(q, limit=limit, threshold=threshold)
    except EmojiValidationError as e:
        raise HTTPException(status_code=400, detail=e.to_payload())
    except EmojifyError as e:
        logger.exception("Search error: %s", e)
        raise HTTPException(status_code=500, detail="Search failed")
