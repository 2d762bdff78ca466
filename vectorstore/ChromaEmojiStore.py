# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-16
# Updated: 2026-10-19
# Description: ChromaEmojiStore
# -----------------------------------------------------------------------------
import math
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncContextManager, Dict, List, Optional, Sequence

import chromadb

from config.Config import Config
from feed.InsertBroadcaster import InsertBroadcaster, InsertSubscription
from record.EmojiRecord import EmojiRecord, EmojiSearchResult, parse_timestamp
from settings import SEARCH_CANDIDATE_PADDING
from utility.errors import PersistenceError
from utility.logging_utils import get_class_logger
from vectorstore.EmojiStore import EmojiStore
from vectorstore.ranking import clamp_similarity, rank_results


def _column(res: Dict[str, Any], key: str) -> Any:
    # Chroma may hand back numpy arrays for embeddings, so never rely on truthiness
    col = res.get(key)
    return [] if col is None else col


def _as_float_list(vec: Any) -> List[float]:
    if hasattr(vec, "tolist"):
        vec = vec.tolist()
    return [float(x) for x in vec]


@dataclass
class ChromaEmojiStore(EmojiStore):
    cfg: Config
    broadcaster: InsertBroadcaster
    client: Any = None
    candidate_padding: int = SEARCH_CANDIDATE_PADDING
    logger: Any = None
    _last_created_at: Optional[datetime] = field(default=None, init=False, repr=False)
    _clock_lock: Any = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

        if self.client is None:
            self.logger.info(
                "Initialising Chroma Cloud client "
                f"(tenant={self.cfg.chroma_tenant}, database={self.cfg.chroma_database})"
            )
            self.client = chromadb.CloudClient(
                tenant=self.cfg.chroma_tenant,
                database=self.cfg.chroma_database,
                api_key=self.cfg.chroma_api_key,
            )

        # cosine space -> distance = 1 - cosine similarity
        self.collection = self.client.get_or_create_collection(
            name=self.cfg.chroma_collection,
            metadata={"hnsw:space": "cosine"},
        )
        self.logger.info(
            "Chroma collection ready: '%s' (dim=%d)",
            self.cfg.chroma_collection,
            self.cfg.embedding_dim,
        )

    def test_connection(self) -> bool:
        """
        Simple health check: can we talk to Chroma and our collection?
        """
        try:
            _ = self.collection.count()
            return True
        except Exception as e:
            self.logger.error("Chroma connection failed: %s", e)
            return False

    def _check_vector(self, vector: Sequence[float], what: str) -> List[float]:
        vec = _as_float_list(vector)
        if len(vec) != self.cfg.embedding_dim:
            raise PersistenceError(
                f"{what} dimension mismatch: expected {self.cfg.embedding_dim}, got {len(vec)}"
            )
        if not all(math.isfinite(x) for x in vec):
            raise PersistenceError(f"{what} contains non-finite values")
        return vec

    def _next_created_at(self) -> datetime:
        """Wall clock, but never earlier than the previous insert from this process."""
        now = datetime.now(timezone.utc)
        with self._clock_lock:
            if self._last_created_at is not None and now < self._last_created_at:
                now = self._last_created_at
            self._last_created_at = now
        return now

    def insert_record(
            self,
            *,
            visual: str,
            description: str,
            embedding: Sequence[float],
    ) -> EmojiRecord:
        vec = self._check_vector(embedding, "Embedding")

        record_id = str(uuid.uuid4())
        created_at = self._next_created_at()

        try:
            self.collection.add(
                ids=[record_id],
                documents=[description],
                embeddings=[vec],
                metadatas=[{
                    "visual": visual,
                    "created_at": created_at.isoformat(),
                    "created_ts": created_at.timestamp(),
                }],
            )
        except Exception as e:
            self.logger.exception("insert_record failed for id=%s: %s", record_id, e)
            raise PersistenceError(f"Failed to persist record: {e}") from e

        record = EmojiRecord(
            id=record_id,
            visual=visual,
            description=description,
            embedding=vec,
            created_at=created_at,
        )
        self.logger.info(
            "Inserted record id=%s into '%s' (description_len=%d)",
            record_id,
            self.cfg.chroma_collection,
            len(description),
        )

        self.broadcaster.publish(record)
        return record

    @staticmethod
    def _to_record(record_id: str, document: Any, metadata: Any, embedding: Any) -> EmojiRecord:
        md = metadata if isinstance(metadata, dict) else {}
        return EmojiRecord(
            id=str(record_id),
            visual=str(md.get("visual", "")),
            description=document or "",
            embedding=_as_float_list(embedding) if embedding is not None else [],
            created_at=parse_timestamp(md["created_at"]),
        )

    def _records_from_get(self, res: Dict[str, Any]) -> List[EmojiRecord]:
        ids = _column(res, "ids")
        docs = _column(res, "documents")
        metas = _column(res, "metadatas")
        embs = _column(res, "embeddings")

        out: List[EmojiRecord] = []
        for i, record_id in enumerate(ids):
            out.append(self._to_record(
                record_id,
                docs[i] if i < len(docs) else None,
                metas[i] if i < len(metas) else None,
                embs[i] if i < len(embs) else None,
            ))
        return out

    def get_record(self, record_id: str) -> Optional[EmojiRecord]:
        try:
            res = self.collection.get(
                ids=[record_id],
                include=["documents", "metadatas", "embeddings"],
            )
        except Exception as e:
            self.logger.exception("get_record failed for id=%s: %s", record_id, e)
            raise PersistenceError(f"Failed to read record: {e}") from e

        records = self._records_from_get(res)
        return records[0] if records else None

    def list_recent(self, limit: int = 50) -> List[EmojiRecord]:
        """
        Most recent `limit` records, newest first.
        Chroma cannot sort, so pick ids from metadata only, then fetch full rows for those.
        """
        self.logger.info("list_recent: collection='%s' limit=%d (start)", self.cfg.chroma_collection, limit)
        try:
            # full metadata scan: O(N) in collection size on every call
            head = self.collection.get(include=["metadatas"])
            ids = _column(head, "ids")
            metas = _column(head, "metadatas")

            stamped = [
                (float((metas[i] or {}).get("created_ts", 0.0)), record_id)
                for i, record_id in enumerate(ids)
            ]
            stamped.sort(reverse=True)
            top_ids = [record_id for _, record_id in stamped[:limit]]
            if not top_ids:
                return []

            res = self.collection.get(
                ids=top_ids,
                include=["documents", "metadatas", "embeddings"],
            )
        except Exception as e:
            self.logger.exception("list_recent failed: %s", e)
            raise PersistenceError(f"Failed to list records: {e}") from e

        records = self._records_from_get(res)
        records.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        self.logger.info("list_recent: -> %d records (done)", len(records))
        return records

    def query_similar(
            self,
            vector: Sequence[float],
            *,
            threshold: float,
            limit: int,
    ) -> List[EmojiSearchResult]:
        vec = self._check_vector(vector, "Query vector")

        self.logger.info(
            "Querying Chroma collection '%s' (threshold=%.3f, limit=%d)",
            self.cfg.chroma_collection,
            threshold,
            limit,
        )

        try:
            total = self.collection.count()
            if total == 0:
                return []

            res = self.collection.query(
                query_embeddings=[vec],
                n_results=min(total, limit + self.candidate_padding),
                include=["documents", "metadatas", "embeddings", "distances"],
            )
        except Exception as e:
            self.logger.error("Error during query_similar execution: %s", e, exc_info=True)
            raise PersistenceError(f"Similarity query failed: {e}") from e

        # single query -> first row of each column
        ids = _column(res, "ids")
        ids0 = ids[0] if len(ids) else []
        docs0 = _column(res, "documents")[0] if len(_column(res, "documents")) else []
        metas0 = _column(res, "metadatas")[0] if len(_column(res, "metadatas")) else []
        embs0 = _column(res, "embeddings")[0] if len(_column(res, "embeddings")) else []
        dists0 = _column(res, "distances")[0] if len(_column(res, "distances")) else []

        candidates: List[EmojiSearchResult] = []
        for i, record_id in enumerate(ids0):
            record = self._to_record(
                record_id,
                docs0[i] if i < len(docs0) else None,
                metas0[i] if i < len(metas0) else None,
                embs0[i] if i < len(embs0) else None,
            )
            dist = dists0[i] if i < len(dists0) else None
            similarity = clamp_similarity(1.0 - float(dist)) if dist is not None else 0.0
            candidates.append(EmojiSearchResult(record=record, similarity=similarity))

        ranked = rank_results(candidates, threshold=threshold, limit=limit)
        self.logger.info(
            "Chroma search complete: %d candidates, %d above threshold (limit %d)",
            len(candidates),
            len(ranked),
            limit,
        )
        return ranked

    def subscribe_inserts(self) -> AsyncContextManager[InsertSubscription]:
        return self.broadcaster.subscribe()
