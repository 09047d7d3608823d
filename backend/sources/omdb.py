from __future__ import annotations

"""
backend/sources/omdb.py

Base de datos abierta secundaria (OMDb).

- Ids: IMDb ("tt...") directo; cualquier otro texto -> búsqueda y primer resultado.
- "N/A" se trata como ausente en todos los campos.
- Respuestas {"Response": "False"}:
    - "Movie not found!" -> sin resultados (no es error)
    - resto              -> error del proveedor (se propaga hasta la frontera)
"""

import re
from collections.abc import Mapping
from typing import Final

from backend import http_client
from backend.config_sources import OMDB_API_KEY, OMDB_BASE_URL
from backend.models import BasicMovieInfo, CastMember, CrewMember, FetchOptions, MovieRecord
from backend.sources.base import MetadataSource, format_date, safe_float, safe_str

_PARENS_RE: Final[re.Pattern[str]] = re.compile(r"\s*\(.*?\)\s*")
_LEADING_INT_RE: Final[re.Pattern[str]] = re.compile(r"^\s*(\d+)")


class OmdbError(RuntimeError):
    """Response=False con un error distinto de "Movie not found!"."""


def _is_movie_not_found(data: Mapping[str, object]) -> bool:
    return data.get("Response") == "False" and data.get("Error") == "Movie not found!"


def _split_names(value: object) -> list[str]:
    text = safe_str(value)
    if text is None:
        return []
    return [p.strip() for p in text.split(",") if p.strip()]


def _clean_writer(name: str) -> str:
    """'Jonathan Nolan (screenplay)' -> 'Jonathan Nolan'."""
    return _PARENS_RE.sub("", name).strip()


def parse_runtime(value: object) -> int | None:
    text = safe_str(value)
    if text is None:
        return None
    m = _LEADING_INT_RE.match(text)
    return int(m.group(1)) if m else None


class OmdbSource(MetadataSource):
    name = "OMDB"
    priority = 2
    external_id_keys = ("imdb",)

    def __init__(self, api_key: str | None = OMDB_API_KEY, *, base_url: str = OMDB_BASE_URL) -> None:
        super().__init__(api_key)
        self.base_url = base_url

    def _request(self, **params: object) -> Mapping[str, object]:
        data = http_client.get_json(self.base_url, params={"apikey": self.api_key, **params})
        if not isinstance(data, Mapping):
            raise OmdbError(f"{self.name}: unexpected payload")
        return data

    def _resolve_imdb_id(self, movie_id: str) -> str | None:
        if movie_id.startswith("tt"):
            return movie_id
        hits = self._search(movie_id)
        return hits[0].id if hits else None

    def _fetch(self, movie_id: str, options: FetchOptions) -> MovieRecord | None:
        imdb_id = self._resolve_imdb_id(movie_id)
        if imdb_id is None:
            self._dbg(f"no IMDb id found for {movie_id!r}")
            return None

        data = self._request(i=imdb_id, plot="full")
        if data.get("Response") == "False":
            self._dbg(f"{imdb_id}: {data.get('Error')!r}")
            return None

        directors = _split_names(data.get("Director"))
        writers = [_clean_writer(w) for w in _split_names(data.get("Writer"))]

        record = MovieRecord(
            id=imdb_id,
            title=safe_str(data.get("Title")) or imdb_id,
            overview=safe_str(data.get("Plot")),
            poster_url=safe_str(data.get("Poster")),
            release_date=format_date(safe_str(data.get("Released")) or data.get("Year")),
            runtime=parse_runtime(data.get("Runtime")),
            genres=_split_names(data.get("Genre")),
            rating=safe_float(safe_str(data.get("imdbRating"))),
            director=safe_str(data.get("Director")),
            writers=writers or None,
            languages=_split_names(data.get("Language")) or None,
            external_ids={"imdb": imdb_id},
            source=self.name,
        )

        if options.include_cast:
            record.cast = [
                CastMember(id=f"omdb-actor-{i}", name=name)
                for i, name in enumerate(_split_names(data.get("Actors")))
            ]

        if options.include_crew:
            crew = [
                CrewMember(id=f"omdb-director-{i}", name=name, job="Director", department="Directing")
                for i, name in enumerate(directors)
            ]
            crew.extend(
                CrewMember(id=f"omdb-writer-{i}", name=name, job="Writer", department="Writing")
                for i, name in enumerate(writers)
            )
            record.crew = crew

        return record

    def _search(self, query: str) -> list[BasicMovieInfo]:
        data = self._request(s=query, type="movie")
        if _is_movie_not_found(data):
            return []
        if data.get("Response") == "False":
            raise OmdbError(f"{self.name}: {data.get('Error')}")

        raw = data.get("Search")
        out: list[BasicMovieInfo] = []
        for item in raw if isinstance(raw, list) else []:
            if not isinstance(item, Mapping):
                continue
            imdb_id = safe_str(item.get("imdbID"))
            title = safe_str(item.get("Title"))
            if imdb_id is None or title is None:
                continue
            out.append(
                BasicMovieInfo(
                    id=imdb_id,
                    title=title,
                    poster_url=safe_str(item.get("Poster")),
                    release_date=format_date(item.get("Year")),
                )
            )
        return out

    def _probe(self) -> bool:
        data = self._request(s="test", type="movie", page=1, r="json")
        return data.get("Response") == "True"
