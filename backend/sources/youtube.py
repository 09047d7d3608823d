from __future__ import annotations

"""
backend/sources/youtube.py

Búsqueda de vídeos (YouTube Data API v3).

- fetch: "<título> official trailer" -> registro con `videos`.
  Un id numérico se traduce a título vía TMDB; "youtube_<id>" no se resuelve.
- search: "<query> movie trailer" -> BasicMovieInfo con título limpiado
  y miniatura como póster.
"""

import re
from collections.abc import Mapping
from typing import Final

from backend import http_client
from backend.config_sources import TMDB_API_KEY, YOUTUBE_API_KEY, YOUTUBE_BASE_URL
from backend.models import BasicMovieInfo, FetchOptions, MovieRecord, VideoRef
from backend.sources.base import MetadataSource, safe_str
from backend.sources.tmdb import TmdbApi

RESULT_PREFIX: Final[str] = "youtube_"
MAX_RESULTS: Final[int] = 10
ASSUMED_SIZE: Final[int] = 1080
THUMBNAIL_URL: Final[str] = "https://img.youtube.com/vi/{key}/maxresdefault.jpg"

_TITLE_NOISE: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"official trailer", re.IGNORECASE),
    re.compile(r"trailer", re.IGNORECASE),
    re.compile(r"\(.*?\)"),
    re.compile(r"\[.*?\]"),
    re.compile(r"\|.*$"),
)


def clean_video_title(title: str) -> str:
    """'Dune: Part Two | Official Trailer 3' -> 'Dune: Part Two'."""
    out = title
    for pattern in _TITLE_NOISE:
        out = pattern.sub("", out)
    return out.strip()


class YouTubeSource(MetadataSource):
    name = "YouTube"
    priority = 5
    external_id_keys = ("tmdb",)

    def __init__(
        self,
        api_key: str | None = YOUTUBE_API_KEY,
        *,
        base_url: str = YOUTUBE_BASE_URL,
        tmdb: TmdbApi | None = None,
    ) -> None:
        super().__init__(api_key)
        self.base_url = base_url.rstrip("/")
        self.tmdb = tmdb or TmdbApi(TMDB_API_KEY)

    def _search_videos(self, query: str, *, max_results: int = MAX_RESULTS) -> list[VideoRef]:
        data = http_client.get_json(
            f"{self.base_url}/search",
            params={"part": "snippet", "maxResults": max_results, "q": query, "type": "video", "key": self.api_key},
        )
        items = data.get("items") if isinstance(data, Mapping) else None
        if not isinstance(items, list):
            raise ValueError(f"{self.name}: missing 'items' in search response")

        videos: list[VideoRef] = []
        for item in items:
            if not isinstance(item, Mapping):
                continue
            id_obj = item.get("id")
            snippet = item.get("snippet")
            video_id = safe_str(id_obj.get("videoId")) if isinstance(id_obj, Mapping) else None
            if video_id is None or not isinstance(snippet, Mapping):
                continue

            title = safe_str(snippet.get("title")) or ""
            channel = safe_str(snippet.get("channelTitle")) or ""
            videos.append(
                VideoRef(
                    id=video_id,
                    key=video_id,
                    site="YouTube",
                    type="Trailer" if "trailer" in title.lower() else "Clip",
                    name=title,
                    size=ASSUMED_SIZE,
                    official="Official" in channel or "official" in title.lower(),
                    published_at=safe_str(snippet.get("publishedAt")),
                )
            )
        return videos

    def _title_for(self, movie_id: str) -> str | None:
        if movie_id.startswith(RESULT_PREFIX):
            return None
        if movie_id.isdigit():
            if not self.tmdb.api_key:
                return None
            return self.tmdb.title_for(movie_id)
        return movie_id

    def _fetch(self, movie_id: str, options: FetchOptions) -> MovieRecord | None:
        title = self._title_for(movie_id)
        if not title:
            return None

        videos = self._search_videos(f"{title} official trailer")
        if not videos:
            return None

        return MovieRecord(id=movie_id, title=title, videos=videos, source=self.name)

    def _search(self, query: str) -> list[BasicMovieInfo]:
        return [
            BasicMovieInfo(
                id=f"{RESULT_PREFIX}{video.id}",
                title=clean_video_title(video.name),
                poster_url=THUMBNAIL_URL.format(key=video.key),
            )
            for video in self._search_videos(f"{query} movie trailer")
        ]

    def _probe(self) -> bool:
        self._search_videos("test", max_results=1)
        return True
