# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-19
# Description: emoji.py
# -----------------------------------------------------------------------------
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from settings import MIME_TYPE_PATTERN


class UploadRequest(BaseModel):
    file: str = Field(..., min_length=1, description="base64-encoded image bytes")
    mimeType: str = Field(..., pattern=MIME_TYPE_PATTERN)


class EmojiRecordOut(BaseModel):
    id: str
    visual: str
    description: str
    embedding: List[float]
    created_at: datetime


class UploadResponse(BaseModel):
    success: bool = True
    emoji: Optional[EmojiRecordOut] = None
    sticker: Optional[EmojiRecordOut] = None
