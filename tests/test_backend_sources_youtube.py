import requests

from backend.sources.tmdb import TmdbApi
from backend.sources.youtube import YouTubeSource, clean_video_title

YT = "https://yt.test/youtube/v3"


def _items(*titles: str, channel: str = "Warner Bros.") -> dict:
    return {
        "items": [
            {
                "id": {"videoId": f"vid{i}"},
                "snippet": {"title": t, "channelTitle": channel, "publishedAt": "2023-05-03T13:00:00Z"},
            }
            for i, t in enumerate(titles)
        ]
    }


def _source(tmdb_key: str | None = "t") -> YouTubeSource:
    return YouTubeSource(api_key="y", base_url=YT, tmdb=TmdbApi(tmdb_key, base_url="https://tmdb.test/3"))


def test_clean_video_title():
    assert clean_video_title("Dune: Part Two | Official Trailer 3") == "Dune: Part Two"
    assert clean_video_title("Inception (2010) Official Trailer [HD]") == "Inception"


def test_fetch_by_title_builds_videos(fake_http):
    def router(url, params):
        assert url == f"{YT}/search"
        assert params["q"] == "Inception official trailer"
        assert params["key"] == "y"
        return _items("Inception - Official Trailer", "Inception behind the scenes")

    fake_http(router)
    record = _source().get_movie_metadata("Inception")

    assert record is not None
    assert record.source == "YouTube"
    videos = record.videos or []
    assert [(v.key, v.type, v.official) for v in videos] == [("vid0", "Trailer", True), ("vid1", "Clip", False)]
    assert videos[0].size == 1080


def test_fetch_numeric_id_resolves_title_through_tmdb(fake_http):
    def router(url, params):
        if url.startswith("https://tmdb.test"):
            return {"id": 27205, "title": "Inception"}
        assert params["q"] == "Inception official trailer"
        return _items("Inception Trailer", channel="Official Channel")

    fake_http(router)
    record = _source().get_movie_metadata("27205")
    assert record is not None and record.title == "Inception"
    assert record.videos and record.videos[0].official is True


def test_fetch_without_tmdb_key_cannot_resolve_numeric(no_network):
    assert _source(tmdb_key=None).get_movie_metadata("27205") is None


def test_fetch_youtube_result_id_is_absent(no_network):
    assert _source().get_movie_metadata("youtube_vid0") is None


def test_fetch_without_videos_is_absent(fake_http):
    fake_http(lambda url, params: {"items": []})
    assert _source().get_movie_metadata("Unknown film") is None


def test_search_returns_prefixed_ids_and_thumbnails(fake_http):
    fake_http(lambda url, params: _items("Dune | Official Trailer"))
    results = _source().search_movies("dune")

    assert [(r.id, r.title) for r in results] == [("youtube_vid0", "Dune")]
    assert results[0].poster_url == "https://img.youtube.com/vi/vid0/maxresdefault.jpg"


def test_probe_requires_items_list(fake_http):
    fake_http(lambda url, params: {"error": {"code": 403}})
    assert _source().is_available() is False

    fake_http(lambda url, params: {"items": []})
    assert _source().is_available() is True


def test_connection_error_is_absent_and_unavailable(fake_http):
    mock = fake_http(lambda url, params: requests.ConnectionError("youtube down"))
    source = _source()

    assert source.get_movie_metadata("Inception") is None
    assert source.get_movie_metadata("27205") is None
    assert source.search_movies("inception") == []
    assert source.is_available() is False
    assert mock.calls
