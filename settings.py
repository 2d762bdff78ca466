# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-14
# Updated: 2026-10-02
# Description: settings.py
# -----------------------------------------------------------------------------
import os
from typing import Tuple


def _env(name: str, default: str = "") -> str:
    """Read env var safely and strip whitespace."""
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return int(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be an int, got {v!r}") from e


def _env_float(name: str, default: float) -> float:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return float(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be a float, got {v!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name, "")
    if v == "":
        return default
    v = v.lower()
    if v in ("1", "true", "t", "yes", "y", "on"):
        return True
    if v in ("0", "false", "f", "no", "n", "off"):
        return False
    raise RuntimeError(f"Env var {name} must be a boolean, got {v!r}")


# -----------------------------------------------------------------------------
# Uploads
# -----------------------------------------------------------------------------
MAX_UPLOAD_BYTES = _env_int("EMOJIFY_MAX_UPLOAD_BYTES", 5 * 1024 * 1024)  # 5 MiB, post-decoding

ALLOWED_MIME_TYPES: Tuple[str, ...] = ("image/jpeg", "image/jpg", "image/png")
MIME_TYPE_PATTERN = r"^image/(jpeg|jpg|png)$"

DESCRIPTION_MAX_CHARS = 120


# -----------------------------------------------------------------------------
# Search
# -----------------------------------------------------------------------------
SEARCH_QUERY_MAX_CHARS = 500
SEARCH_LIMIT_DEFAULT = _env_int("EMOJIFY_SEARCH_LIMIT_DEFAULT", 10)
SEARCH_LIMIT_MAX = 50
SEARCH_THRESHOLD_DEFAULT = _env_float("EMOJIFY_SEARCH_THRESHOLD_DEFAULT", 0.7)

# Extra candidates pulled from the vector store before ranking, so ties at
# the limit boundary are settled by our tie-break rather than the index.
SEARCH_CANDIDATE_PADDING = _env_int("EMOJIFY_SEARCH_CANDIDATE_PADDING", 10)

# Tolerance when comparing cosine similarity against the threshold
SIMILARITY_EPSILON = 1e-6


# -----------------------------------------------------------------------------
# Feed
# -----------------------------------------------------------------------------
FEED_INITIAL_LIMIT = _env_int("EMOJIFY_FEED_INITIAL_LIMIT", 50)
FEED_KEEPALIVE_SECONDS = _env_float("EMOJIFY_FEED_KEEPALIVE_SECONDS", 15.0)
FEED_SUBSCRIBER_QUEUE_SIZE = _env_int("EMOJIFY_FEED_SUBSCRIBER_QUEUE_SIZE", 256)


# -----------------------------------------------------------------------------
# UI
# -----------------------------------------------------------------------------
SEARCH_DEBOUNCE_SECONDS = _env_float("EMOJIFY_SEARCH_DEBOUNCE_SECONDS", 0.3)
MOUNT_UI = _env_bool("EMOJIFY_MOUNT_UI", True)


# -----------------------------------------------------------------------------
# Sanity checks (tunable)
# -----------------------------------------------------------------------------
if not 1 <= SEARCH_LIMIT_DEFAULT <= SEARCH_LIMIT_MAX:
    raise RuntimeError(f"SEARCH_LIMIT_DEFAULT must be within 1..{SEARCH_LIMIT_MAX}")

if not 0.0 <= SEARCH_THRESHOLD_DEFAULT <= 1.0:
    raise RuntimeError("SEARCH_THRESHOLD_DEFAULT must be within 0..1")

if FEED_INITIAL_LIMIT < 1:
    raise RuntimeError("FEED_INITIAL_LIMIT must be positive")
