# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-19
# Description: search.py
# -----------------------------------------------------------------------------
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from api.schemas.emoji import EmojiRecordOut
from settings import (
    SEARCH_LIMIT_DEFAULT,
    SEARCH_LIMIT_MAX,
    SEARCH_QUERY_MAX_CHARS,
    SEARCH_THRESHOLD_DEFAULT,
)


class SearchRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    query: str = Field(..., min_length=1, max_length=SEARCH_QUERY_MAX_CHARS)
    limit: int = Field(SEARCH_LIMIT_DEFAULT, ge=1, le=SEARCH_LIMIT_MAX)
    threshold: float = Field(SEARCH_THRESHOLD_DEFAULT, ge=0.0, le=1.0)


class SearchHit(EmojiRecordOut):
    similarity: float


class SearchResponse(BaseModel):
    results: List[SearchHit]
    query: str
    count: int
