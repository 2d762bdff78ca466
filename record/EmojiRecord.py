# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-15
# Description: EmojiRecord
# -----------------------------------------------------------------------------
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List


def parse_timestamp(value: Any) -> datetime:
    """Accepts datetime / ISO-8601 string (with or without 'Z'); always returns an aware UTC datetime."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class EmojiRecord:
    """Persisted unit: visual (glyph or sticker URL) + description + embedding."""
    id: str
    visual: str
    description: str
    embedding: List[float]
    created_at: datetime

    def to_dict(self, include_embedding: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "visual": self.visual,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
        }
        if include_embedding:
            out["embedding"] = list(self.embedding)
        return out

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "EmojiRecord":
        return EmojiRecord(
            id=str(data["id"]),
            visual=str(data["visual"]),
            description=str(data["description"]),
            embedding=[float(x) for x in (data.get("embedding") or [])],
            created_at=parse_timestamp(data["created_at"]),
        )


@dataclass(frozen=True)
class EmojiSearchResult:
    """A record plus its cosine similarity to the query (search responses only)."""
    record: EmojiRecord
    similarity: float = field(default=0.0)

    def to_dict(self, include_embedding: bool = True) -> Dict[str, Any]:
        out = self.record.to_dict(include_embedding=include_embedding)
        out["similarity"] = self.similarity
        return out
