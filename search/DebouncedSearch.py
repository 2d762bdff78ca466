# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-24
# Description: DebouncedSearch
# -----------------------------------------------------------------------------
import asyncio
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from settings import SEARCH_DEBOUNCE_SECONDS
from utility.logging_utils import get_class_logger

T = TypeVar("T")


class DebouncedSearch(Generic[T]):
    """
    Per-session search trigger. Each submit() supersedes the previous one;
    only input that stays unchanged for `delay` seconds reaches search_fn,
    and only the latest submission's result is handed back.
    Extra keyword params are passed through to search_fn unchanged.
    """

    def __init__(
            self,
            search_fn: Callable[..., Awaitable[T]],
            *,
            delay: float = SEARCH_DEBOUNCE_SECONDS,
            logger=None,
    ) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.search_fn = search_fn
        self.delay = delay
        self.logger = logger or get_class_logger(self.__class__)
        self._generation = 0

    def cancel(self) -> None:
        """Drop whatever is pending."""
        self._generation += 1

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def submit(self, text: Optional[str], **params: Any) -> Optional[T]:
        self._generation += 1
        generation = self._generation

        query = (text or "").strip()
        if not query:
            return None

        await asyncio.sleep(self.delay)
        if not self._is_current(generation):
            self.logger.debug("debounce: %r superseded before firing", query)
            return None

        result = await self.search_fn(query, **params)
        if not self._is_current(generation):
            self.logger.debug("debounce: stale result for %r discarded", query)
            return None
        return result
