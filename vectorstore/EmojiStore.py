# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-16
# Description: EmojiStore
# -----------------------------------------------------------------------------

from typing import AsyncContextManager, List, Optional, Protocol, Sequence, runtime_checkable

from feed.InsertBroadcaster import InsertSubscription
from record.EmojiRecord import EmojiRecord, EmojiSearchResult


@runtime_checkable
class EmojiStore(Protocol):
    def test_connection(self) -> bool:
        ...

    def insert_record(
            self,
            *,
            visual: str,
            description: str,
            embedding: Sequence[float],
    ) -> EmojiRecord:
        ...

    def get_record(self, record_id: str) -> Optional[EmojiRecord]:
        ...

    def list_recent(self, limit: int = 50) -> List[EmojiRecord]:
        ...

    def query_similar(
            self,
            vector: Sequence[float],
            *,
            threshold: float,
            limit: int,
    ) -> List[EmojiSearchResult]:
        ...

    def subscribe_inserts(self) -> AsyncContextManager[InsertSubscription]:
        ...
