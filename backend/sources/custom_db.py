from __future__ import annotations

"""
backend/sources/custom_db.py

Almacén local de overrides (CustomDB): mapping id -> MovieRecord en memoria,
sembrado al arrancar y vivo durante todo el proceso.

- Prioridad 0: gana a cualquier fuente de red.
- Siempre disponible (sin red, sin credencial).
- fetch devuelve una copia profunda: quien llama nunca muta el almacén.
- upsert / remove son operaciones atómicas bajo un lock.
"""

import threading
from copy import deepcopy

from backend import logger
from backend.models import BasicMovieInfo, CastMember, FetchOptions, MovieRecord
from backend.sources.base import MetadataSource


def seed_records() -> list[MovieRecord]:
    return [
        MovieRecord(
            id="custom-1",
            title="Inception",
            overview=(
                "A thief who steals corporate secrets through the use of dream-sharing technology "
                "is given the inverse task of planting an idea into the mind of a C.E.O."
            ),
            poster_url="https://image.tmdb.org/t/p/w500/9gk7adHYeDvHkCSEqAvQNLV5Uge.jpg",
            backdrop_url="https://image.tmdb.org/t/p/original/s3TBrRGB1iav7gFOCNx3H31MoES.jpg",
            release_date="2010-07-16",
            runtime=148,
            genres=["Action", "Science Fiction", "Adventure"],
            rating=8.8,
            director="Christopher Nolan",
            writers=["Christopher Nolan"],
            cast=[
                CastMember(id="custom-actor-1", name="Leonardo DiCaprio", character="Dom Cobb"),
                CastMember(id="custom-actor-2", name="Joseph Gordon-Levitt", character="Arthur"),
                CastMember(id="custom-actor-3", name="Elliot Page", character="Ariadne"),
            ],
            external_ids={"imdb": "tt1375666", "tmdb": "27205"},
        ),
        MovieRecord(
            id="custom-2",
            title="The Godfather",
            overview=(
                "The aging patriarch of an organized crime dynasty transfers control of his "
                "clandestine empire to his reluctant son."
            ),
            poster_url="https://image.tmdb.org/t/p/w500/3bhkrj58Vtu7enYsRolD1fZdja1.jpg",
            backdrop_url="https://image.tmdb.org/t/p/original/tmU7GeKVybMWFButWEGl2M4GeiP.jpg",
            release_date="1972-03-14",
            runtime=175,
            genres=["Drama", "Crime"],
            rating=9.2,
            director="Francis Ford Coppola",
            writers=["Mario Puzo", "Francis Ford Coppola"],
            cast=[
                CastMember(id="custom-actor-4", name="Marlon Brando", character="Don Vito Corleone"),
                CastMember(id="custom-actor-5", name="Al Pacino", character="Michael Corleone"),
                CastMember(id="custom-actor-6", name="James Caan", character="Sonny Corleone"),
            ],
            external_ids={"imdb": "tt0068646", "tmdb": "238"},
        ),
    ]


class CustomDbSource(MetadataSource):
    name = "CustomDB"
    priority = 0
    requires_api_key = False

    def __init__(self, records: list[MovieRecord] | None = None) -> None:
        super().__init__(None)
        self._lock = threading.Lock()
        self._records: dict[str, MovieRecord] = {}
        for record in seed_records() if records is None else records:
            self.upsert(record)

    def __len__(self) -> int:
        return len(self._records)

    def _fetch(self, movie_id: str, options: FetchOptions) -> MovieRecord | None:
        with self._lock:
            record = self._records.get(movie_id)
            return deepcopy(record) if record is not None else None

    def _search(self, query: str) -> list[BasicMovieInfo]:
        needle = query.lower()
        with self._lock:
            records = list(self._records.values())
        return [
            BasicMovieInfo(
                id=r.id,
                title=r.title,
                poster_url=r.poster_url,
                release_date=r.release_date,
                rating=r.rating,
            )
            for r in records
            if needle in r.title.lower()
        ]

    def _probe(self) -> bool:
        return True

    def upsert(self, record: MovieRecord) -> None:
        stored = deepcopy(record)
        stored.source = self.name
        with self._lock:
            self._records[stored.id] = stored
        logger.debug_ctx(self.name, f"upsert {stored.id!r} ({stored.title!r})")

    def remove(self, movie_id: str | int) -> bool:
        key = str(movie_id)
        with self._lock:
            existed = self._records.pop(key, None) is not None
        logger.debug_ctx(self.name, f"remove {key!r} -> {existed}")
        return existed
