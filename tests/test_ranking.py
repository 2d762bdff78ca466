# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-28
# Updated: 2026-10-19
# Description: test_ranking.py
# -----------------------------------------------------------------------------
import pytest

from fakes import cosine_similarity, make_record, unit
from record.EmojiRecord import EmojiSearchResult
from vectorstore.ranking import clamp_similarity, rank_results


def _hit(record_id: str, similarity: float, offset_seconds: int = 0) -> EmojiSearchResult:
    return EmojiSearchResult(record=make_record(record_id, offset_seconds=offset_seconds), similarity=similarity)


def test_cosine_similarity_of_identical_vectors_is_one():
    v = unit(0.1, 0.2, 0.3, 0.4)
    assert cosine_similarity(v, v) == pytest.approx(1.0)


def test_cosine_similarity_is_clamped_and_handles_zero_vectors():
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0
    assert clamp_similarity(1.0000001) == 1.0


def test_rank_orders_by_similarity_then_newest_then_id():
    hits = [
        _hit("b", 0.8, offset_seconds=5),
        _hit("a", 0.8, offset_seconds=5),
        _hit("old", 0.8, offset_seconds=1),
        _hit("top", 0.9, offset_seconds=0),
    ]

    ranked = rank_results(hits, threshold=0.5, limit=10)

    assert [h.record.id for h in ranked] == ["top", "a", "b", "old"]


def test_rank_applies_threshold_with_tolerance_and_limit():
    hits = [_hit("edge", 0.7 - 1e-9), _hit("below", 0.69), _hit("x", 0.75), _hit("y", 0.95)]

    ranked = rank_results(hits, threshold=0.7, limit=2)

    assert [h.record.id for h in ranked] == ["y", "x"]
    assert [h.record.id for h in rank_results(hits, threshold=0.7, limit=10)] == ["y", "x", "edge"]


def test_rank_is_deterministic_across_input_orders():
    hits = [_hit(str(i), 0.8, offset_seconds=i % 2) for i in range(6)]

    first = [h.record.id for h in rank_results(hits, threshold=0.0, limit=6)]
    second = [h.record.id for h in rank_results(list(reversed(hits)), threshold=0.0, limit=6)]

    assert first == second
