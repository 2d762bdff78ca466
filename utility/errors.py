# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-14
# Description: utility/errors.py
# -----------------------------------------------------------------------------
from __future__ import annotations

from typing import Any, List, Optional


class EmojifyError(Exception):
    """Base class for failures raised by the ingest/search/feed services."""


class EmojiValidationError(EmojifyError):
    """
    Bad input shape or range. Reported to the client as 400 together with
    field-level details where we have them.
    """

    def __init__(self, message: str, details: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict:
        payload: dict = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class UpstreamError(EmojifyError):
    """An external service (generator, embeddings, blob storage) failed or returned junk."""


class PersistenceError(EmojifyError):
    """The record store rejected a write or a read."""
