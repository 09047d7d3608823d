from __future__ import annotations

"""
backend/merge.py

Merge de registros de varias fuentes + saneado final.

merge(target, source)
---------------------
`target` es el registro de mayor precedencia y se muta in-place.
Tabla explícita por campo (no copia reflexiva de claves):

- Escalares: se copian solo si target tiene None.
- Listas "planas" (writers, languages, keywords, production_companies):
  se copian solo si target es None o lista vacía.
- external_ids: unión por clave; nunca sobrescribe una clave existente.
- Uniones por clave:
    videos  -> key
    cast    -> name (case-insensitive)
    crew    -> name + job (case-insensitive)
    genres  -> valor (case-insensitive)
    similar -> id
- source: se añade el nombre de la fuente solo si aportó algo y no estaba ya.
  Esto hace que merge sea idempotente.

sanitize(record)
----------------
Copia superficial: NaN numéricos -> 0 y colecciones ausentes -> [].
"""

import math
from collections.abc import Callable, Hashable
from dataclasses import replace
from typing import Final, TypeVar

from backend.models import CastMember, CrewMember, MovieRecord

T = TypeVar("T")

_SCALAR_FIELDS: Final[tuple[str, ...]] = (
    "title",
    "original_title",
    "overview",
    "tagline",
    "poster_url",
    "backdrop_url",
    "release_date",
    "runtime",
    "rating",
    "vote_count",
    "director",
    "budget",
    "revenue",
)

_FILL_LIST_FIELDS: Final[tuple[str, ...]] = (
    "writers",
    "production_companies",
    "languages",
    "keywords",
)

NUMERIC_FIELDS: Final[tuple[str, ...]] = ("rating", "runtime", "vote_count", "budget", "revenue")

COLLECTION_FIELDS: Final[tuple[str, ...]] = (
    "genres",
    "writers",
    "cast",
    "crew",
    "videos",
    "similar",
    "languages",
    "keywords",
    "production_companies",
)


def _cast_key(member: CastMember) -> str:
    return member.name.lower()


def _crew_key(member: CrewMember) -> str:
    return f"{member.name.lower()}-{(member.job or '').lower()}"


def _union_into(target: list[T] | None, incoming: list[T] | None, key: Callable[[T], Hashable]) -> tuple[list[T] | None, bool]:
    """Añade a target los items de incoming cuya clave no existe. Devuelve (lista, cambió)."""
    if not incoming:
        return target, False

    out = target if target is not None else []
    seen = {key(item) for item in out}
    changed = False
    for item in incoming:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        out.append(item)
        changed = True
    return out, changed


def merge(target: MovieRecord, source: MovieRecord) -> MovieRecord:
    contributed = False

    for name in _SCALAR_FIELDS:
        if getattr(target, name) is None:
            value = getattr(source, name)
            if value is not None:
                setattr(target, name, value)
                contributed = True

    for name in _FILL_LIST_FIELDS:
        if not getattr(target, name):
            value = getattr(source, name)
            if value:
                setattr(target, name, list(value))
                contributed = True

    for provider, ext_id in source.external_ids.items():
        if ext_id and provider not in target.external_ids:
            target.external_ids[provider] = ext_id
            contributed = True

    unions: tuple[tuple[str, Callable[..., Hashable]], ...] = (
        ("videos", lambda v: v.key),
        ("cast", _cast_key),
        ("crew", _crew_key),
        ("genres", lambda g: g.lower()),
        ("similar", lambda m: m.id),
    )
    for name, key in unions:
        merged, changed = _union_into(getattr(target, name), getattr(source, name), key)
        if changed:
            setattr(target, name, merged)
            contributed = True

    if contributed and source.source:
        names = target.source_names()
        for contributor in source.source_names():
            if contributor not in names:
                names.append(contributor)
        target.source = ", ".join(names)

    return target


def _is_nan(value: object) -> bool:
    return isinstance(value, float) and math.isnan(value)


def sanitize(record: MovieRecord) -> MovieRecord:
    changes: dict[str, object] = {}

    for name in NUMERIC_FIELDS:
        if _is_nan(getattr(record, name)):
            changes[name] = 0

    for name in COLLECTION_FIELDS:
        if getattr(record, name) is None:
            changes[name] = []

    return replace(record, **changes)
