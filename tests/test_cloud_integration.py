# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-02
# Description: test_cloud_integration.py - live Azure OpenAI / OpenAI / Chroma Cloud
# -----------------------------------------------------------------------------
import base64
import logging
from pathlib import Path

import pytest

logger = logging.getLogger(__name__)

SAMPLE_IMAGE = Path(__file__).parent / "data" / "sample.jpg"


@pytest.fixture(scope="module")
def container():
    from api.AppContainer import AppContainer

    try:
        return AppContainer()
    except ValueError as e:
        pytest.skip(f"cloud configuration missing: {e}")


@pytest.mark.integration
def test_deep_health_against_cloud(container):
    result = container.health_service.deep_health()
    print("\nDEEP HEALTH:", result.model_dump())
    assert result.status == "ok"


@pytest.mark.integration
def test_upload_then_search_against_cloud(container):
    if not SAMPLE_IMAGE.exists():
        pytest.skip(f"sample image not found: {SAMPLE_IMAGE}")

    encoded = base64.b64encode(SAMPLE_IMAGE.read_bytes()).decode("ascii")
    record = container.ingest_service.ingest(encoded, "image/jpeg")
    logger.info("Created record %s: %s %s", record.id, record.visual, record.description)

    out = container.search_service.search(record.description, limit=5, threshold=0.9)

    assert record.id in [r["id"] for r in out["results"]]
