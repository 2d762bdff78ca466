# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-12
# Updated: 2026-09-28
# Description: conftest.py
# -----------------------------------------------------------------------------

import os
import sys
from pathlib import Path

import pytest

# add project root (and this folder, for fakes.py) to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(Path(__file__).resolve().parent))

# keep unit tests off gradio and off the log file
os.environ.setdefault("EMOJIFY_MOUNT_UI", "0")
os.environ.setdefault("EMOJIFY_LOG_TO_FILE", "0")

from fakes import (  # noqa: E402
    DIM,
    FakeBlobStore,
    FakeEmbedder,
    FakeGenerator,
    InMemoryEmojiStore,
)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def store() -> InMemoryEmojiStore:
    return InMemoryEmojiStore(dim=DIM)


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()
