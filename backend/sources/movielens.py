from __future__ import annotations

"""
backend/sources/movielens.py

Dataset de valoraciones (MovieLens), servido a través de TMDB como proxy.

MovieLens no tiene API pública de detalle: los datos de la película vienen de
TMDB (con keywords) y la valoración media se deriva de forma determinista del
id TMDB en escala de 5 estrellas, que se reescala a 0–10.

Ids aceptados: "603" (TMDB), "ml-603" (forma propia) o texto libre.
"""

from collections.abc import Mapping
from typing import Final

from backend.config_sources import MOVIELENS_API_KEY
from backend.models import BasicMovieInfo, FetchOptions, MovieRecord
from backend.sources.base import MetadataSource, format_date, normalize_rating, safe_float, safe_int, safe_str
from backend.sources.tmdb import TmdbApi, image_url, names_of

ML_PREFIX: Final[str] = "ml-"
MAX_STARS: Final[float] = 5.0
SEARCH_LIMIT: Final[int] = 10
PROBE_MOVIE_ID: Final[str] = "550"


def movielens_rating(tmdb_id: int) -> tuple[float, str]:
    """(media en estrellas 0–5, id MovieLens) para un id TMDB."""
    average = 2.5 + (tmdb_id % 50) / 10
    return min(MAX_STARS, average), f"{ML_PREFIX}{tmdb_id}"


class MovieLensSource(MetadataSource):
    name = "MovieLens"
    priority = 3
    external_id_keys = ("movielens", "tmdb")

    def __init__(self, api_key: str | None = MOVIELENS_API_KEY, *, api: TmdbApi | None = None) -> None:
        super().__init__(api_key)
        self.api = api or TmdbApi(api_key)

    def _resolve_id(self, movie_id: str) -> int | None:
        if movie_id.startswith(ML_PREFIX):
            movie_id = movie_id[len(ML_PREFIX):]
        if movie_id.isdigit():
            return int(movie_id)
        hits = self._search(movie_id)
        return int(hits[0].id) if hits else None

    def _fetch(self, movie_id: str, options: FetchOptions) -> MovieRecord | None:
        tmdb_id = self._resolve_id(movie_id)
        if tmdb_id is None:
            return None

        data = self.api.get(f"/movie/{tmdb_id}", append_to_response="keywords")
        stars, ml_id = movielens_rating(tmdb_id)

        keywords_block = data.get("keywords")
        keywords = names_of(keywords_block.get("keywords")) if isinstance(keywords_block, Mapping) else []

        return MovieRecord(
            id=str(tmdb_id),
            title=safe_str(data.get("title")) or str(tmdb_id),
            overview=safe_str(data.get("overview")),
            poster_url=image_url(self.api.image_base_url, "w500", data.get("poster_path")),
            backdrop_url=image_url(self.api.image_base_url, "original", data.get("backdrop_path")),
            release_date=format_date(data.get("release_date")),
            runtime=safe_int(data.get("runtime")),
            genres=names_of(data.get("genres")),
            rating=normalize_rating(stars, MAX_STARS) if stars else safe_float(data.get("vote_average")),
            keywords=keywords or None,
            external_ids={"tmdb": str(tmdb_id), "movielens": ml_id},
            source=self.name,
        )

    def _search(self, query: str) -> list[BasicMovieInfo]:
        out: list[BasicMovieInfo] = []
        for raw in self.api.results("/search/movie", query=query)[:SEARCH_LIMIT]:
            info = self.api.basic_info(raw)
            tmdb_id = safe_int(raw.get("id"))
            if info is None or tmdb_id is None:
                continue
            stars, _ = movielens_rating(tmdb_id)
            info.rating = normalize_rating(stars, MAX_STARS)
            out.append(info)
        return out

    def _probe(self) -> bool:
        self.api.get(f"/movie/{PROBE_MOVIE_ID}")
        return True
