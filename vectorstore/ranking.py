# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-16
# Updated: 2026-10-19
# Description: vectorstore/ranking.py
# -----------------------------------------------------------------------------
from typing import Iterable, List

from record.EmojiRecord import EmojiSearchResult
from settings import SIMILARITY_EPSILON


def clamp_similarity(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def rank_results(
        results: Iterable[EmojiSearchResult],
        *,
        threshold: float,
        limit: int,
) -> List[EmojiSearchResult]:
    """
    Threshold filter + deterministic ordering:
      1) similarity descending
      2) created_at descending (newer wins a tie)
      3) id ascending (last resort, keeps output stable across calls)
    """
    kept = [r for r in results if r.similarity >= threshold - SIMILARITY_EPSILON]

    # stable sorts, least significant key first
    kept.sort(key=lambda r: r.record.id)
    kept.sort(key=lambda r: r.record.created_at, reverse=True)
    kept.sort(key=lambda r: r.similarity, reverse=True)

    return kept[:limit]
