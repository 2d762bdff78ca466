# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: feed.py
# -----------------------------------------------------------------------------
from typing import List

from pydantic import BaseModel

from api.schemas.emoji import EmojiRecordOut


class FeedResponse(BaseModel):
    records: List[EmojiRecordOut]
    count: int
