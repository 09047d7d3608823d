from __future__ import annotations

"""
backend/models.py

Modelo normalizado que devuelven todas las fuentes.

Convención:
- None = "ausente" (la fuente no aporta ese dato).
- Las colecciones pueden venir como None desde un adaptador; tras `sanitize()`
  siempre son listas (vacías si no hay datos).
- rating siempre en escala 0–10.
"""

import math
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from backend.config_sources import DEFAULT_LANGUAGE

MediaType = Literal["movie", "tv"]


@dataclass(slots=True)
class CastMember:
    id: str
    name: str
    character: str | None = None
    profile_url: str | None = None


@dataclass(slots=True)
class CrewMember:
    id: str
    name: str
    job: str | None = None
    department: str | None = None
    profile_url: str | None = None


@dataclass(slots=True)
class VideoRef:
    id: str
    key: str
    site: str
    type: str
    name: str
    size: int | None = None
    official: bool | None = None
    published_at: str | None = None


@dataclass(slots=True)
class BasicMovieInfo:
    """Forma de resultado de búsqueda (y de `similar`)."""

    id: str
    title: str
    poster_url: str | None = None
    release_date: str | None = None
    rating: float | None = None
    media_type: MediaType | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class FetchOptions:
    include_cast: bool = False
    include_crew: bool = False
    include_videos: bool = False
    include_similar: bool = False
    language: str = DEFAULT_LANGUAGE


@dataclass(slots=True)
class MovieRecord:
    id: str
    title: str
    original_title: str | None = None
    overview: str | None = None
    tagline: str | None = None
    poster_url: str | None = None
    backdrop_url: str | None = None
    release_date: str | None = None
    runtime: int | None = None
    genres: list[str] | None = None
    rating: float | None = None
    vote_count: int | None = None
    director: str | None = None
    writers: list[str] | None = None
    cast: list[CastMember] | None = None
    crew: list[CrewMember] | None = None
    production_companies: list[str] | None = None
    budget: int | None = None
    revenue: int | None = None
    languages: list[str] | None = None
    keywords: list[str] | None = None
    videos: list[VideoRef] | None = None
    similar: list[BasicMovieInfo] | None = None
    external_ids: dict[str, str] = field(default_factory=dict)
    source: str = ""

    def source_names(self) -> list[str]:
        return [s.strip() for s in self.source.split(",") if s.strip()]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MovieRecord:
        """
        Construye un MovieRecord desde JSON (p.ej. body de PUT /overrides/{id}).
        Claves desconocidas se ignoran.

        Los campos numéricos se coercionan (p.ej. "7.5" -> 7.5); un valor no numérico,
        negativo o un rating fuera de 0–10 lanza ValueError.
        """
        # Import tardío para minimizar riesgo de ciclos (sources.base importa models).
        from backend.sources.base import safe_float, safe_int

        def _number(key: str, parse: Callable[[object], Any], upper: float | None = None) -> Any:
            raw = data.get(key)
            if raw is None:
                return None
            try:
                value = parse(raw)
            except OverflowError:
                value = None
            if value is None or not math.isfinite(value) or value < 0 or (upper is not None and value > upper):
                raise ValueError(f"invalid {key}: {raw!r}")
            return value

        def _list(key: str, item_cls: type | None = None) -> list[Any] | None:
            raw = data.get(key)
            if raw is None:
                return None
            if item_cls is None:
                return [str(v) for v in raw]
            return [v if isinstance(v, item_cls) else item_cls(**v) for v in raw]

        external = data.get("external_ids") or {}
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            original_title=data.get("original_title"),
            overview=data.get("overview"),
            tagline=data.get("tagline"),
            poster_url=data.get("poster_url"),
            backdrop_url=data.get("backdrop_url"),
            release_date=data.get("release_date"),
            runtime=_number("runtime", safe_int),
            genres=_list("genres"),
            rating=_number("rating", safe_float, upper=10.0),
            vote_count=_number("vote_count", safe_int),
            director=data.get("director"),
            writers=_list("writers"),
            cast=_list("cast", CastMember),
            crew=_list("crew", CrewMember),
            production_companies=_list("production_companies"),
            budget=_number("budget", safe_int),
            revenue=_number("revenue", safe_int),
            languages=_list("languages"),
            keywords=_list("keywords"),
            videos=_list("videos", VideoRef),
            similar=_list("similar", BasicMovieInfo),
            external_ids={str(k): str(v) for k, v in external.items() if v is not None and str(v)},
            source=str(data.get("source") or ""),
        )
