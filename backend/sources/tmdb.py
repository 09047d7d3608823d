from __future__ import annotations

"""
backend/sources/tmdb.py

Catálogo principal (TMDB).

Ids aceptados:
- "27205"      -> id TMDB
- "tt1375666"  -> id IMDb, se resuelve con /find
- texto libre  -> búsqueda y primer resultado de tipo película

Además de las tres capacidades comunes expone `get_upcoming_movies()`,
que el orquestador usa para completar búsquedas cortas.
"""

import re
from collections.abc import Mapping
from typing import Final

from backend import http_client
from backend.config_sources import DEFAULT_LANGUAGE, TMDB_API_KEY, TMDB_BASE_URL, TMDB_IMAGE_BASE_URL
from backend.models import BasicMovieInfo, CastMember, CrewMember, FetchOptions, MovieRecord, VideoRef
from backend.sources.base import MetadataSource, format_date, safe_float, safe_int, safe_str

IMDB_ID_RE: Final[re.Pattern[str]] = re.compile(r"^tt\d+$", re.IGNORECASE)

_WRITER_JOBS: Final[frozenset[str]] = frozenset({"Screenplay", "Writer", "Novel", "Story"})

CAST_LIMIT: Final[int] = 10
SIMILAR_LIMIT: Final[int] = 6
UPCOMING_LANGUAGE: Final[str] = "en-US"


def image_url(base: str, size: str, path: object) -> str | None:
    p = safe_str(path)
    if p is None:
        return None
    return f"{base.rstrip('/')}/{size}{p}"


class TmdbApi:
    """
    Cliente mínimo de la API v3 de TMDB.

    Lo comparten las fuentes que usan TMDB como proxy (TMDB, MovieLens, TMPDB)
    y las que necesitan resolver un id numérico a título (YouTube, OpenMedia).
    """

    def __init__(self, api_key: str | None, *, base_url: str = TMDB_BASE_URL, image_base_url: str = TMDB_IMAGE_BASE_URL) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.image_base_url = image_base_url

    def get(self, path: str, **params: object) -> Mapping[str, object]:
        data = http_client.get_json(f"{self.base_url}{path}", params={"api_key": self.api_key, **params})
        if not isinstance(data, Mapping):
            raise ValueError(f"Unexpected TMDB payload for {path}")
        return data

    def results(self, path: str, **params: object) -> list[Mapping[str, object]]:
        raw = self.get(path, **params).get("results")
        if not isinstance(raw, list):
            return []
        return [r for r in raw if isinstance(r, Mapping)]

    def find_by_imdb(self, imdb_id: str) -> str | None:
        data = self.get(f"/find/{imdb_id}", external_source="imdb_id")
        movies = data.get("movie_results")
        if isinstance(movies, list):
            for m in movies:
                if isinstance(m, Mapping) and m.get("id") is not None:
                    return str(m["id"])
        return None

    def title_for(self, tmdb_id: str) -> str | None:
        return safe_str(self.get(f"/movie/{tmdb_id}").get("title"))

    def basic_info(self, raw: Mapping[str, object], *, media_type: str | None = None, size: str = "w500") -> BasicMovieInfo | None:
        title = safe_str(raw.get("title")) or safe_str(raw.get("name"))
        if raw.get("id") is None or title is None:
            return None
        return BasicMovieInfo(
            id=str(raw["id"]),
            title=title,
            poster_url=image_url(self.image_base_url, size, raw.get("poster_path")),
            release_date=format_date(raw.get("release_date") or raw.get("first_air_date")),
            rating=safe_float(raw.get("vote_average")),
            media_type=media_type,  # type: ignore[arg-type]
        )


class TmdbSource(MetadataSource):
    name = "TMDB"
    priority = 1
    external_id_keys = ("tmdb", "imdb")

    def __init__(self, api_key: str | None = TMDB_API_KEY, *, api: TmdbApi | None = None) -> None:
        super().__init__(api_key)
        self.api = api or TmdbApi(api_key)

    # ---------------- resolución de ids ----------------

    def _resolve_id(self, movie_id: str) -> str | None:
        if movie_id.isdigit():
            return movie_id
        if IMDB_ID_RE.match(movie_id):
            return self.api.find_by_imdb(movie_id.lower())
        for hit in self._search(movie_id):
            if hit.media_type != "tv":
                return hit.id
        return None

    # ---------------- fetch ----------------

    def _fetch(self, movie_id: str, options: FetchOptions) -> MovieRecord | None:
        tmdb_id = self._resolve_id(movie_id)
        if tmdb_id is None:
            self._dbg(f"could not resolve {movie_id!r} to a TMDB id")
            return None

        append: list[str] = []
        if options.include_cast or options.include_crew:
            append.append("credits")
        if options.include_videos:
            append.append("videos")
        if options.include_similar:
            append.append("similar")

        details = self.api.get(
            f"/movie/{tmdb_id}",
            language=options.language or DEFAULT_LANGUAGE,
            append_to_response=",".join(append),
        )

        record = MovieRecord(
            id=tmdb_id,
            title=safe_str(details.get("title")) or tmdb_id,
            original_title=safe_str(details.get("original_title")),
            overview=safe_str(details.get("overview")),
            tagline=safe_str(details.get("tagline")),
            poster_url=image_url(self.api.image_base_url, "w500", details.get("poster_path")),
            backdrop_url=image_url(self.api.image_base_url, "original", details.get("backdrop_path")),
            release_date=format_date(details.get("release_date")),
            runtime=safe_int(details.get("runtime")),
            genres=names_of(details.get("genres")),
            rating=safe_float(details.get("vote_average")),
            vote_count=safe_int(details.get("vote_count")),
            production_companies=names_of(details.get("production_companies")),
            budget=safe_int(details.get("budget")),
            revenue=safe_int(details.get("revenue")),
            languages=names_of(details.get("spoken_languages"), key="english_name"),
            external_ids=_external_ids(tmdb_id, details.get("imdb_id")),
            source=self.name,
        )

        credits = details.get("credits")
        if isinstance(credits, Mapping):
            cast, crew = self._parse_credits(credits)
            if options.include_cast:
                record.cast = cast
            if options.include_crew:
                record.crew = crew
                directors = [c.name for c in crew if c.job == "Director"]
                if directors:
                    record.director = directors[0]
                writers = [c.name for c in crew if c.department == "Writing" or (c.job or "") in _WRITER_JOBS]
                if writers:
                    record.writers = writers

        if options.include_videos:
            record.videos = _parse_videos(details.get("videos"))

        if options.include_similar:
            similar = details.get("similar")
            raw = similar.get("results") if isinstance(similar, Mapping) else None
            items = [self.api.basic_info(r) for r in (raw or []) if isinstance(r, Mapping)]
            record.similar = [i for i in items if i is not None][:SIMILAR_LIMIT]

        return record

    def _parse_credits(self, credits: Mapping[str, object]) -> tuple[list[CastMember], list[CrewMember]]:
        cast: list[CastMember] = []
        for person in _mappings(credits.get("cast"))[:CAST_LIMIT]:
            name = safe_str(person.get("name"))
            if name is None:
                continue
            cast.append(
                CastMember(
                    id=str(person.get("id")),
                    name=name,
                    character=safe_str(person.get("character")),
                    profile_url=image_url(self.api.image_base_url, "w185", person.get("profile_path")),
                )
            )

        crew: list[CrewMember] = []
        for person in _mappings(credits.get("crew")):
            name = safe_str(person.get("name"))
            if name is None:
                continue
            crew.append(
                CrewMember(
                    id=str(person.get("id")),
                    name=name,
                    job=safe_str(person.get("job")),
                    department=safe_str(person.get("department")),
                    profile_url=image_url(self.api.image_base_url, "w185", person.get("profile_path")),
                )
            )
        return cast, crew

    # ---------------- search ----------------

    def _perform_search(self, query: str) -> list[BasicMovieInfo]:
        movies = self.api.results("/search/movie", query=query, include_adult="false")
        shows = self.api.results("/search/tv", query=query, include_adult="false")

        out: list[BasicMovieInfo] = []
        for raw in movies:
            info = self.api.basic_info(raw, media_type="movie")
            if info is not None:
                out.append(info)
        for raw in shows:
            info = self.api.basic_info(raw, media_type="tv")
            if info is not None:
                out.append(info)
        return out

    def _search(self, query: str) -> list[BasicMovieInfo]:
        exact = self._perform_search(query)
        if exact:
            return exact

        # "Daredevil: Born Again" -> "Daredevil: Born"
        words = [w for w in query.split(" ") if len(w) > 1]
        if len(words) > 1:
            return self._perform_search(" ".join(words[:2]))
        return []

    # ---------------- extra: próximos estrenos ----------------

    def get_upcoming_movies(self) -> list[BasicMovieInfo]:
        if not self.is_configured:
            return []
        try:
            raw = self.api.results("/movie/upcoming", language=UPCOMING_LANGUAGE, page=1)
        except Exception as exc:
            self._dbg(f"upcoming failed: {exc!r}")
            return []
        items = [self.api.basic_info(r, media_type="movie") for r in raw]
        return [i for i in items if i is not None]


def _mappings(value: object) -> list[Mapping[str, object]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, Mapping)]


def names_of(value: object, *, key: str = "name") -> list[str]:
    out: list[str] = []
    for item in _mappings(value):
        name = safe_str(item.get(key))
        if name:
            out.append(name)
    return out


def _external_ids(tmdb_id: str, imdb_id: object) -> dict[str, str]:
    ids = {"tmdb": tmdb_id}
    imdb = safe_str(imdb_id)
    if imdb:
        ids["imdb"] = imdb
    return ids


def _parse_videos(value: object) -> list[VideoRef]:
    raw = value.get("results") if isinstance(value, Mapping) else None
    videos: list[VideoRef] = []
    for v in _mappings(raw):
        key = safe_str(v.get("key"))
        if key is None:
            continue
        videos.append(
            VideoRef(
                id=str(v.get("id") or key),
                key=key,
                site=safe_str(v.get("site")) or "",
                type=safe_str(v.get("type")) or "",
                name=safe_str(v.get("name")) or "",
                size=safe_int(v.get("size")),
                official=v.get("official") if isinstance(v.get("official"), bool) else None,
                published_at=safe_str(v.get("published_at")),
            )
        )
    return videos
