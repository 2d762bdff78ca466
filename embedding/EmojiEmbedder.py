# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-15
# Description: EmojiEmbedder
# -----------------------------------------------------------------------------
import time
from typing import Any, List, Optional

import numpy as np
from openai import AzureOpenAI

from config.Config import Config
from utility.errors import UpstreamError
from utility.logging_utils import get_class_logger


class EmojiEmbedder:
    """
    Text -> fixed-length vector via Azure OpenAI embeddings.
    No retries: a failed call surfaces immediately as UpstreamError.
    """

    def __init__(
            self,
            cfg: Config,
            *,
            normalize: bool = True,
            client: Optional[Any] = None,
            logger=None,
    ):
        self.cfg = cfg
        self.normalize = normalize
        self.logger = logger or get_class_logger(self.__class__)

        # Azure OpenAI client setup
        self.client = client or AzureOpenAI(
            api_key=cfg.openai_azure_api_key,
            azure_endpoint=cfg.openai_azure_endpoint,
            api_version="2024-10-21",
        )
        self.model = cfg.openai_azure_embed_deployment or "text-embedding-3-small"
        self.dimensions = cfg.embedding_dim
        self.logger.info("Azure OpenAI Embedder initialized '%s' (dim=%d)", self.model, self.dimensions)

    def _embed_batch(self, texts: List[str]) -> np.ndarray:
        start = time.time()
        try:
            resp = self.client.embeddings.create(model=self.model, input=texts)
        except Exception as e:
            self.logger.exception("Embedding call failed (model=%s): %s", self.model, e)
            raise UpstreamError(f"Embedding request failed: {e}") from e

        data = getattr(resp, "data", None) or []
        if len(data) != len(texts):
            raise UpstreamError(f"Embedding response count mismatch: {len(data)} != {len(texts)}")

        try:
            arr = np.asarray([d.embedding for d in data], dtype=np.float32)
        except (TypeError, ValueError, AttributeError) as e:
            raise UpstreamError(f"Invalid embedding payload: {e}") from e

        if arr.ndim != 2 or arr.shape[1] == 0:
            raise UpstreamError(f"Invalid embedding shape: {arr.shape}")

        # Normalize vectors (cosine-friendly)
        if self.normalize:
            norms = np.linalg.norm(arr, axis=1, keepdims=True) + 1e-12
            arr = arr / norms

        self.logger.debug(
            "Embedded %d text(s) in %.1f ms (dim=%d)",
            len(texts),
            (time.time() - start) * 1000.0,
            arr.shape[1],
        )
        return arr

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        cleaned = [(t or "").strip() for t in texts]
        if not cleaned or any(not t for t in cleaned):
            raise ValueError("texts must be non-empty strings")
        return self._embed_batch(cleaned).tolist()

    def embed_text(self, text: str) -> List[float]:
        vec = self.embed_texts([text])[0]
        if len(vec) != self.dimensions:
            # store raises PersistenceError on mismatch
            self.logger.warning(
                "Embedding dimension %d differs from configured %d (model=%s)",
                len(vec), self.dimensions, self.model,
            )
        return vec

    def healthcheck(self) -> bool:
        try:
            vec = self.embed_text("emoji embedding healthcheck")
            return len(vec) == self.dimensions
        except Exception as e:
            self.logger.warning("Embedding healthcheck failed: %s", e)
            return False
