# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: EmojiFeedService
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Any, AsyncContextManager, Dict

from feed.InsertBroadcaster import InsertSubscription
from settings import FEED_INITIAL_LIMIT, SEARCH_LIMIT_MAX
from utility.errors import EmojiValidationError, PersistenceError
from utility.logging_utils import get_class_logger
from vectorstore.EmojiStore import EmojiStore


@dataclass
class EmojiFeedService:
    """
    Server side of the live feed: one bulk read of recent records
    plus a subscription to inserts made after it.
    """

    store: EmojiStore
    max_limit: int = max(FEED_INITIAL_LIMIT, SEARCH_LIMIT_MAX)
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

    def recent(self, limit: Any = None) -> Dict[str, Any]:
        if limit is None:
            limit = FEED_INITIAL_LIMIT
        try:
            limit = int(limit)
        except (TypeError, ValueError) as e:
            raise EmojiValidationError(
                "Invalid request data",
                details=[{"loc": ["limit"], "msg": "limit must be an integer", "type": "int_parsing"}],
            ) from e
        if not 1 <= limit <= self.max_limit:
            raise EmojiValidationError(
                "Invalid request data",
                details=[{
                    "loc": ["limit"],
                    "msg": f"limit must be between 1 and {self.max_limit}",
                    "type": "value_error",
                }],
            )

        try:
            records = self.store.list_recent(limit=limit)
        except PersistenceError:
            raise
        except Exception as e:
            self.logger.exception("recent: store read failed: %s", e)
            raise PersistenceError(f"Failed to load feed: {e}") from e

        self.logger.info("recent: limit=%d -> %d record(s)", limit, len(records))
        return {"records": [r.to_dict() for r in records], "count": len(records)}

    def subscribe(self) -> AsyncContextManager[InsertSubscription]:
        return self.store.subscribe_inserts()
