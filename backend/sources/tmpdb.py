from __future__ import annotations

"""
backend/sources/tmpdb.py

Base de datos de pósters (TMPDB). Solo aporta imágenes en tamaño original:
primer póster / fondo de /images y, si no hay, los paths del detalle.
"""

from collections.abc import Mapping
from typing import Final

from backend.config_sources import TMPDB_API_KEY
from backend.models import BasicMovieInfo, FetchOptions, MovieRecord
from backend.sources.base import MetadataSource, safe_str
from backend.sources.tmdb import TmdbApi, image_url

PROBE_MOVIE_ID: Final[str] = "550"


def _first_file_path(value: object) -> str | None:
    if isinstance(value, list):
        for item in value:
            if isinstance(item, Mapping):
                path = safe_str(item.get("file_path"))
                if path:
                    return path
    return None


class TmpdbSource(MetadataSource):
    name = "TMPDB"
    priority = 4
    external_id_keys = ("tmdb",)

    def __init__(self, api_key: str | None = TMPDB_API_KEY, *, api: TmdbApi | None = None) -> None:
        super().__init__(api_key)
        self.api = api or TmdbApi(api_key)

    def _fetch(self, movie_id: str, options: FetchOptions) -> MovieRecord | None:
        if movie_id.isdigit():
            tmdb_id = movie_id
        else:
            hits = self._search(movie_id)
            if not hits:
                return None
            tmdb_id = hits[0].id

        images = self.api.get(f"/movie/{tmdb_id}/images")
        details = self.api.get(f"/movie/{tmdb_id}")

        poster = _first_file_path(images.get("posters")) or details.get("poster_path")
        backdrop = _first_file_path(images.get("backdrops")) or details.get("backdrop_path")

        return MovieRecord(
            id=tmdb_id,
            title=safe_str(details.get("title")) or tmdb_id,
            poster_url=image_url(self.api.image_base_url, "original", poster),
            backdrop_url=image_url(self.api.image_base_url, "original", backdrop),
            external_ids={"tmdb": tmdb_id},
            source=self.name,
        )

    def _search(self, query: str) -> list[BasicMovieInfo]:
        items = [self.api.basic_info(r, size="original") for r in self.api.results("/search/movie", query=query)]
        for item in items:
            if item is not None:
                item.rating = None
        return [i for i in items if i is not None]

    def _probe(self) -> bool:
        self.api.get(f"/movie/{PROBE_MOVIE_ID}")
        return True
