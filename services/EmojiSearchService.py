# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-19
# Description: EmojiSearchService
# -----------------------------------------------------------------------------
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from api.schemas.search import SearchRequest
from embedding.EmojiEmbedder import EmojiEmbedder
from utility.errors import EmojiValidationError, PersistenceError, UpstreamError
from utility.logging_utils import get_class_logger
from vectorstore.EmojiStore import EmojiStore
from vectorstore.ranking import rank_results


@dataclass
class EmojiSearchService:
    """
    Semantic search over stored descriptions.
    query text -> embedding -> store similarity query -> ranked results.
    """

    store: EmojiStore
    embedder: EmojiEmbedder
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

    @staticmethod
    def validate_params(
        query: Any,
        limit: Any = None,
        threshold: Any = None,
    ) -> SearchRequest:
        params: Dict[str, Any] = {"query": query}
        if limit is not None:
            params["limit"] = limit
        if threshold is not None:
            params["threshold"] = threshold

        try:
            return SearchRequest(**params)
        except PydanticValidationError as e:
            raise EmojiValidationError(
                "Invalid search parameters",
                details=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

    def search(
        self,
        query: Any,
        limit: Any = None,
        threshold: Any = None,
        include_embedding: bool = True,
    ) -> Dict[str, Any]:
        req = self.validate_params(query, limit, threshold)
        start = time.time()

        self.logger.info(
            "search: query=%r limit=%d threshold=%.3f (start)", req.query, req.limit, req.threshold
        )

        try:
            vector = self.embedder.embed_text(req.query)
        except UpstreamError:
            raise
        except Exception as e:
            self.logger.exception("search: embedding failed: %s", e)
            raise UpstreamError(f"Query embedding failed: {e}") from e

        try:
            candidates = self.store.query_similar(vector, threshold=req.threshold, limit=req.limit)
        except PersistenceError:
            raise
        except Exception as e:
            self.logger.exception("search: store query failed: %s", e)
            raise PersistenceError(f"Similarity query failed: {e}") from e

        # stores may return unordered or over-long candidate lists
        ranked = rank_results(candidates, threshold=req.threshold, limit=req.limit)

        self.logger.info(
            "search: %d result(s) in %.1f ms (done)", len(ranked), (time.time() - start) * 1000.0
        )
        return {
            "results": [r.to_dict(include_embedding=include_embedding) for r in ranked],
            "query": req.query,
            "count": len(ranked),
        }
