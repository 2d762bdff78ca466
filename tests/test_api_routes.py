# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-30
# Description: test_api_routes.py
# -----------------------------------------------------------------------------
import base64
import math

import pytest
from starlette.testclient import TestClient

from api.dependencies import (
    get_feed_service,
    get_health_service,
    get_ingest_service,
    get_search_service,
)
from api.main import app
from fakes import FakeBlobStore, FakeEmbedder, FakeGenerator, InMemoryEmojiStore, make_record, unit
from services.EmojiFeedService import EmojiFeedService
from services.EmojiHealthService import EmojiHealthService
from services.EmojiIngestService import EmojiIngestService
from services.EmojiSearchService import EmojiSearchService
from settings import MAX_UPLOAD_BYTES


class Wiring:
    def __init__(self, *, visual_mode: str = "glyph") -> None:
        image = visual_mode == "image-asset"
        self.store = InMemoryEmojiStore()
        self.generator = FakeGenerator(image=image)
        self.embedder = FakeEmbedder({"happy dog": unit(1.0)})
        self.blob_store = FakeBlobStore() if image else None
        self.ingest = EmojiIngestService(
            generator=self.generator,
            embedder=self.embedder,
            store=self.store,
            blob_store=self.blob_store,
            visual_mode=visual_mode,
        )
        self.search = EmojiSearchService(store=self.store, embedder=self.embedder)
        self.feed = EmojiFeedService(store=self.store)
        self.health = EmojiHealthService(
            store=self.store,
            embedder=self.embedder,
            generator=self.generator,
            blob_store=self.blob_store,
            visual_mode=visual_mode,
        )


def _install(wiring: Wiring) -> TestClient:
    app.dependency_overrides[get_ingest_service] = lambda: wiring.ingest
    app.dependency_overrides[get_search_service] = lambda: wiring.search
    app.dependency_overrides[get_feed_service] = lambda: wiring.feed
    app.dependency_overrides[get_health_service] = lambda: wiring.health
    return TestClient(app)


@pytest.fixture
def wiring():
    w = Wiring()
    yield w
    app.dependency_overrides.clear()


@pytest.fixture
def client(wiring):
    return _install(wiring)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "message": "Emojify API running"}


def test_deep_health(client):
    resp = client.get("/health/deep")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["results"] == {"store": True, "embedding": True, "generator": True}
    assert body["summary"] == {"total": 3, "passed": 3, "failed": 0}


def test_deep_health_reports_failure(wiring, client):
    wiring.embedder.fail = True
    body = client.get("/health/deep").json()
    assert body["status"] == "error"
    assert body["results"]["embedding"] is False
    assert body["summary"]["failed"] == 1


def test_post_emoji_success(wiring, client):
    resp = client.post("/emoji", json={"file": _b64(b"jpeg"), "mimeType": "image/jpeg"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["emoji"]["visual"] == "🐶"
    assert body["emoji"]["description"] == "a joyful puppy"
    assert wiring.store.get_record(body["emoji"]["id"]) is not None


def test_post_sticker_alias_in_image_mode():
    w = Wiring(visual_mode="image-asset")
    client = _install(w)
    try:
        resp = client.post("/sticker", json={"file": _b64(b"png"), "mimeType": "image/png"})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    body = resp.json()
    assert "emoji" not in body
    assert body["sticker"]["visual"].startswith("https://")
    assert len(w.blob_store.uploads) == 1


def test_post_emoji_empty_file(wiring, client):
    resp = client.post("/emoji", json={"file": "", "mimeType": "image/jpeg"})

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Invalid request data"
    assert isinstance(body["details"], list)
    assert wiring.generator.calls == []
    assert wiring.embedder.calls == []


def test_post_emoji_bad_mime(wiring, client):
    resp = client.post("/emoji", json={"file": _b64(b"gif"), "mimeType": "image/gif"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request data"


def test_post_emoji_too_large(wiring, client):
    resp = client.post("/emoji", json={"file": _b64(b"\x00" * (MAX_UPLOAD_BYTES + 1)), "mimeType": "image/png"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "File size must be less than 5MB"}
    assert wiring.generator.calls == []


def test_post_emoji_non_json_body(client):
    resp = client.post("/emoji", content=b"not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request data"


def test_post_emoji_upstream_failure_is_generic_500(wiring, client):
    wiring.generator.fail = True
    resp = client.post("/emoji", json={"file": _b64(b"jpeg"), "mimeType": "image/jpeg"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_post_emoji_store_failure(wiring, client):
    wiring.store.fail_insert = True
    resp = client.post("/emoji", json={"file": _b64(b"jpeg"), "mimeType": "image/jpeg"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to save emoji"}


def test_search_happy_dog(wiring, client):
    wiring.store.add(make_record("puppy", description="a joyful puppy",
                                 embedding=unit(0.82, math.sqrt(1 - 0.82 ** 2))))
    wiring.store.add(make_record("cat", description="a sad cat",
                                 embedding=unit(0.31, 0.0, math.sqrt(1 - 0.31 ** 2))))

    resp = client.get("/search", params={"q": "happy dog", "limit": 5, "threshold": 0.7})

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 1
    assert body["query"] == "happy dog"
    assert body["results"][0]["description"] == "a joyful puppy"


@pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "dog", "limit": 100}, {"q": "dog", "threshold": 2}])
def test_search_invalid_params(client, params):
    resp = client.get("/search", params=params)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid search parameters"


def test_search_failure_is_500(wiring, client):
    wiring.store.fail_query = True
    resp = client.get("/search", params={"q": "happy dog"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Search failed"}


def test_feed_bulk_load(wiring, client):
    for i in range(3):
        wiring.store.add(make_record(f"r{i}", offset_seconds=i))

    resp = client.get("/feed", params={"limit": 2})

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 2
    assert [r["id"] for r in body["records"]] == ["r2", "r1"]


def test_feed_bad_limit(client):
    resp = client.get("/feed", params={"limit": 0})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request data"
