# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-09-22
# Description: EmojiHealthService.py
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Any, Dict, Optional

from api.schemas.health import CheckSummary, DeepHealthResponse
from utility.logging_utils import get_class_logger


@dataclass
class EmojiHealthService:
    """
    Connectivity checks against each external collaborator.
    Returns DeepHealthResponse for API layer
    """

    store: Any
    embedder: Any
    generator: Any
    blob_store: Optional[Any] = None
    visual_mode: str = "glyph"
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

    def _run(self, name: str, check) -> bool:
        try:
            ok = bool(check())
        except Exception as e:
            self.logger.error("Health check '%s' raised: %s", name, e)
            ok = False
        self.logger.info("Health check '%s': %s", name, "PASS" if ok else "FAIL")
        return ok

    def deep_health(self) -> DeepHealthResponse:
        results: Dict[str, bool] = {
            "store": self._run("store", self.store.test_connection),
            "embedding": self._run("embedding", self.embedder.healthcheck),
            "generator": self._run("generator", self.generator.healthcheck),
        }
        if self.blob_store is not None:
            results["blob"] = self._run("blob", self.blob_store.test_connection)

        total = len(results)
        passed = sum(1 for ok in results.values() if ok)
        failed = total - passed

        return DeepHealthResponse(
            status="ok" if failed == 0 else "error",
            visual_mode=self.visual_mode,
            results=results,
            summary=CheckSummary(total=total, passed=passed, failed=failed),
        )
