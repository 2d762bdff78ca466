# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-30
# Description: test_embedder.py
# -----------------------------------------------------------------------------
from types import SimpleNamespace

import numpy as np
import pytest

from embedding.EmojiEmbedder import EmojiEmbedder
from utility.errors import UpstreamError


class FakeEmbeddingsClient:
    def __init__(self, vectors=None, fail=False):
        self.vectors = vectors
        self.fail = fail
        self.calls = []
        self.embeddings = SimpleNamespace(create=self._create)

    def _create(self, model, input):
        self.calls.append((model, list(input)))
        if self.fail:
            raise RuntimeError("503 from Azure")
        vectors = self.vectors if self.vectors is not None else [[3.0, 4.0, 0.0] for _ in input]
        return SimpleNamespace(data=[SimpleNamespace(embedding=v) for v in vectors])


def _cfg(dim=3):
    return SimpleNamespace(
        openai_azure_api_key="key",
        openai_azure_endpoint="https://example.openai.azure.com",
        openai_azure_embed_deployment="text-embedding-3-small",
        embedding_dim=dim,
    )


def test_embed_text_is_normalised():
    client = FakeEmbeddingsClient()
    vec = EmojiEmbedder(_cfg(), client=client).embed_text("a joyful puppy")

    assert vec == pytest.approx([0.6, 0.8, 0.0], abs=1e-6)
    assert np.linalg.norm(vec) == pytest.approx(1.0, abs=1e-6)
    assert client.calls == [("text-embedding-3-small", ["a joyful puppy"])]


def test_embed_texts_rejects_blank_input():
    emb = EmojiEmbedder(_cfg(), client=FakeEmbeddingsClient())
    with pytest.raises(ValueError):
        emb.embed_texts(["ok", "   "])
    with pytest.raises(ValueError):
        emb.embed_texts([])


def test_upstream_failure_is_not_retried():
    client = FakeEmbeddingsClient(fail=True)
    emb = EmojiEmbedder(_cfg(), client=client)

    with pytest.raises(UpstreamError):
        emb.embed_text("x")

    assert len(client.calls) == 1


def test_count_mismatch_is_upstream_error():
    emb = EmojiEmbedder(_cfg(), client=FakeEmbeddingsClient(vectors=[]))
    with pytest.raises(UpstreamError):
        emb.embed_text("x")


def test_healthcheck_checks_dimension():
    assert EmojiEmbedder(_cfg(dim=3), client=FakeEmbeddingsClient()).healthcheck() is True
    assert EmojiEmbedder(_cfg(dim=8), client=FakeEmbeddingsClient()).healthcheck() is False
    assert EmojiEmbedder(_cfg(), client=FakeEmbeddingsClient(fail=True)).healthcheck() is False
