import pytest

pytest.importorskip("httpx")

from fastapi.testclient import TestClient

from backend.metadata_service import MetadataService
from backend.sources import CustomDbSource
from server.api.app import create_app
from server.api.deps import get_metadata_service
from server.api.settings import Settings


def _settings() -> Settings:
    return Settings(
        host="127.0.0.1",
        port=8000,
        reload=False,
        log_level="INFO",
        cors_origins_raw="*",
        cors_allow_credentials=False,
        gzip_min_size=0,
        warm_up_on_startup=False,
    )


def _client(service: MetadataService) -> TestClient:
    app = create_app(_settings())
    app.dependency_overrides[get_metadata_service] = lambda: service
    return TestClient(app)


def test_put_then_get_then_delete(no_network):
    client = _client(MetadataService([CustomDbSource(records=[])]))

    res = client.put(
        "/overrides/custom-7",
        json={
            "id": "ignored",
            "title": "Heat",
            "runtime": 170,
            "cast": [{"id": "p1", "name": "Al Pacino", "character": "Vincent Hanna"}],
        },
    )
    assert res.status_code == 200
    assert res.json() == {"id": "custom-7", "stored": True}

    body = client.get("/movies/custom-7").json()
    assert body["id"] == "custom-7"
    assert body["runtime"] == 170
    assert body["cast"][0]["character"] == "Vincent Hanna"
    assert body["source"] == "CustomDB"

    assert client.delete("/overrides/custom-7").json() == {"id": "custom-7", "removed": True}
    assert client.delete("/overrides/custom-7").status_code == 404
    assert client.get("/movies/custom-7").status_code == 404


def test_put_requires_title(no_network):
    client = _client(MetadataService([CustomDbSource(records=[])]))

    assert client.put("/overrides/x", json={"runtime": 90}).status_code == 422
    assert client.put("/overrides/x", json={"title": "   "}).status_code == 422


def test_put_without_store_is_503(source_factory):
    client = _client(MetadataService([source_factory("TMDB", 1)]))
    res = client.put("/overrides/x", json={"title": "X"})
    assert res.status_code == 503


def test_put_rejects_out_of_range_or_non_numeric_fields(no_network):
    client = _client(MetadataService([CustomDbSource(records=[])]))

    assert client.put("/overrides/x", json={"title": "X", "rating": 50}).status_code == 422
    assert client.put("/overrides/x", json={"title": "X", "runtime": "long"}).status_code == 422
    assert client.put("/overrides/x", json={"title": "X", "budget": -1}).status_code == 422
    assert client.get("/movies/x").status_code == 404

    res = client.put("/overrides/x", json={"title": "X", "rating": "7.5", "vote_count": "1,200"})
    assert res.status_code == 200
    body = client.get("/movies/x").json()
    assert body["rating"] == 7.5
    assert body["vote_count"] == 1200
