import pytest

pytest.importorskip("httpx")

from fastapi.testclient import TestClient

from backend.metadata_service import MetadataService
from backend.models import BasicMovieInfo, CastMember, MovieRecord
from server.api.app import create_app
from server.api.deps import get_metadata_service
from server.api.services import metrics
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


@pytest.fixture()
def client(source_factory):
    metrics.reset()
    tmdb = source_factory(
        "TMDB",
        1,
        id_keys=("tmdb",),
        records={
            "27205": MovieRecord(
                id="27205",
                title="Inception",
                cast=[CastMember(id="6193", name="Leonardo DiCaprio")],
                external_ids={"tmdb": "27205", "imdb": "tt1375666"},
            )
        },
        results=[BasicMovieInfo(id="27205", title="Inception", release_date="2010-07-15")],
    )
    tmdb.get_upcoming_movies = lambda: [BasicMovieInfo(id="1", title="Inception II")]
    omdb = source_factory(
        "OMDB",
        2,
        id_keys=("imdb",),
        records={"tt1375666": MovieRecord(id="tt1375666", title="Inception", runtime=148, rating=8.8)},
    )
    service = MetadataService([tmdb, omdb])
    app = create_app(_settings())
    app.dependency_overrides[get_metadata_service] = lambda: service
    return TestClient(app)


def test_movie_details_plain_and_enhanced(client):
    plain = client.get("/movies/27205")
    assert plain.status_code == 200
    body = plain.json()
    assert body["title"] == "Inception"
    assert body["runtime"] is None
    assert body["genres"] == []
    assert body["source"] == "TMDB"

    enhanced = client.get("/movies/27205", params={"enhanced": "true", "cast": "true"}).json()
    assert enhanced["runtime"] == 148
    assert enhanced["rating"] == 8.8
    assert [c["name"] for c in enhanced["cast"]] == ["Leonardo DiCaprio"]
    assert enhanced["source"] == "TMDB, OMDB"


def test_movie_details_unknown_is_404(client):
    res = client.get("/movies/unknown-id")
    assert res.status_code == 404
    assert res.json()["detail"] == "No metadata found for unknown-id"
    assert metrics.snapshot()["movie_lookups_not_found_total"] == 1
    assert metrics.snapshot()["http_responses_4xx_total"] == 1


def test_search_and_upcoming(client):
    res = client.get("/movies/search", params={"q": "incep"})
    assert res.status_code == 200
    assert res.json() == {
        "items": [
            {
                "id": "27205",
                "title": "Inception",
                "poster_url": None,
                "release_date": "2010-07-15",
                "rating": None,
                "media_type": None,
            }
        ],
        "total": 1,
        "query": "incep",
    }

    ids = [i["id"] for i in client.get("/movies/search", params={"q": "incep", "upcoming": "true"}).json()["items"]]
    assert ids == ["27205", "1"]


def test_search_empty_and_validation(client):
    res = client.get("/movies/search", params={"q": "nothing"})
    assert res.json()["total"] == 0
    assert metrics.snapshot()["movie_searches_empty_total"] == 1

    assert client.get("/movies/search").status_code == 422
