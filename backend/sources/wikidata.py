from __future__ import annotations

"""
backend/sources/wikidata.py

Grafo de conocimiento (Wikidata). API pública, sin credencial.

Resolución de ids:
- "Q12345"      -> id Wikidata directo
- "27205"       -> haswbstatement:P4947=<tmdb>
- "tt1375666"   -> haswbstatement:P345=<imdb>

Propiedades usadas:
- P345  IMDb id
- P577  fecha de publicación
- P136  género
- P57   director
- P161  reparto
- P31   instancia de (Q11424 = película)

Los valores de tipo entidad (géneros, director, reparto) se resuelven a
etiquetas con wbgetentities en lotes de 50, en el idioma pedido con
fallback a DEFAULT_LANGUAGE.
"""

import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Final

from backend import http_client
from backend.config_sources import DEFAULT_LANGUAGE, WIKIDATA_API_URL
from backend.models import BasicMovieInfo, CastMember, FetchOptions, MovieRecord
from backend.sources.base import MetadataSource, format_date, safe_str

QID_RE: Final[re.Pattern[str]] = re.compile(r"^Q\d+$")

P_IMDB: Final[str] = "P345"
P_TMDB: Final[str] = "P4947"
P_PUBLICATION_DATE: Final[str] = "P577"
P_GENRE: Final[str] = "P136"
P_DIRECTOR: Final[str] = "P57"
P_CAST: Final[str] = "P161"
P_INSTANCE_OF: Final[str] = "P31"
Q_FILM: Final[str] = "Q11424"

SEARCH_LIMIT: Final[int] = 10
LABEL_BATCH_SIZE: Final[int] = 50


def _chunked(values: list[str], size: int) -> Iterator[list[str]]:
    for i in range(0, len(values), size):
        yield values[i : i + size]


def _snaks(entity: Mapping[str, object], prop: str) -> list[Mapping[str, object]]:
    claims = entity.get("claims")
    if not isinstance(claims, Mapping):
        return []
    raw = claims.get(prop)
    if not isinstance(raw, list):
        return []
    out: list[Mapping[str, object]] = []
    for claim in raw:
        if not isinstance(claim, Mapping):
            continue
        mainsnak = claim.get("mainsnak")
        if isinstance(mainsnak, Mapping) and isinstance(mainsnak.get("datavalue"), Mapping):
            out.append(mainsnak["datavalue"])  # type: ignore[arg-type]
    return out


def claim_string(entity: Mapping[str, object], prop: str) -> str | None:
    for dv in _snaks(entity, prop):
        value = safe_str(dv.get("value"))
        if value:
            return value
    return None


def claim_date(entity: Mapping[str, object], prop: str) -> str | None:
    """'+2010-07-16T00:00:00Z' -> '2010-07-16'."""
    for dv in _snaks(entity, prop):
        value = dv.get("value")
        if dv.get("type") == "time" and isinstance(value, Mapping):
            time = safe_str(value.get("time"))
            if time:
                return time.lstrip("+").split("T", 1)[0]
    return None


def claim_qids(entity: Mapping[str, object], prop: str) -> list[str]:
    out: list[str] = []
    for dv in _snaks(entity, prop):
        value = dv.get("value")
        if dv.get("type") == "wikibase-entityid" and isinstance(value, Mapping):
            qid = safe_str(value.get("id"))
            if qid and qid not in out:
                out.append(qid)
    return out


def localized(entity: Mapping[str, object], key: str, language: str, fallback: str = DEFAULT_LANGUAGE) -> str | None:
    block = entity.get(key)
    if not isinstance(block, Mapping):
        return None
    for lang in (language, fallback):
        item = block.get(lang)
        if isinstance(item, Mapping):
            value = safe_str(item.get("value"))
            if value:
                return value
    return None


def is_film(entity: Mapping[str, object]) -> bool:
    return Q_FILM in claim_qids(entity, P_INSTANCE_OF)


class WikidataSource(MetadataSource):
    name = "Wikidata"
    priority = 6
    external_id_keys = ("wikidata", "tmdb", "imdb")
    requires_api_key = False

    def __init__(self, *, api_url: str = WIKIDATA_API_URL) -> None:
        super().__init__(None)
        self.api_url = api_url

    def _request(self, **params: object) -> Mapping[str, object]:
        data = http_client.get_json(self.api_url, params={"format": "json", **params})
        if not isinstance(data, Mapping):
            raise ValueError(f"{self.name}: unexpected payload")
        return data

    def _entities(self, ids: Iterable[str], *, props: str, languages: str | None = None) -> dict[str, Mapping[str, object]]:
        ids_list = list(ids)
        out: dict[str, Mapping[str, object]] = {}
        for batch in _chunked(ids_list, LABEL_BATCH_SIZE):
            data = self._request(action="wbgetentities", ids="|".join(batch), props=props, languages=languages)
            entities = data.get("entities")
            if not isinstance(entities, Mapping):
                continue
            for qid in batch:
                ent = entities.get(qid)
                if isinstance(ent, Mapping) and "missing" not in ent:
                    out[qid] = ent
        return out

    def _labels(self, qids: list[str], language: str) -> dict[str, str]:
        if not qids:
            return {}
        languages = language if language == DEFAULT_LANGUAGE else f"{language}|{DEFAULT_LANGUAGE}"
        entities = self._entities(qids, props="labels", languages=languages)
        return {qid: localized(ent, "labels", language) or qid for qid, ent in entities.items()}

    def _find_by_statement(self, prop: str, value: str) -> str | None:
        data = self._request(action="query", list="search", srsearch=f"haswbstatement:{prop}={value}")
        query = data.get("query")
        hits = query.get("search") if isinstance(query, Mapping) else None
        if isinstance(hits, list) and hits and isinstance(hits[0], Mapping):
            return safe_str(hits[0].get("title"))
        return None

    def _resolve_qid(self, movie_id: str) -> str | None:
        if QID_RE.match(movie_id):
            return movie_id
        if movie_id.isdigit():
            return self._find_by_statement(P_TMDB, movie_id)
        if movie_id.startswith("tt"):
            return self._find_by_statement(P_IMDB, movie_id)
        return None

    def _fetch(self, movie_id: str, options: FetchOptions) -> MovieRecord | None:
        qid = self._resolve_qid(movie_id)
        if qid is None:
            self._dbg(f"no Wikidata id found for {movie_id!r}")
            return None

        entity = self._entities([qid], props="labels|descriptions|claims").get(qid)
        if entity is None:
            self._dbg(f"entity {qid} not found")
            return None

        language = options.language or DEFAULT_LANGUAGE
        genre_ids = claim_qids(entity, P_GENRE)
        director_ids = claim_qids(entity, P_DIRECTOR)
        cast_ids = claim_qids(entity, P_CAST) if options.include_cast else []

        labels = self._labels(genre_ids + director_ids + cast_ids, language)

        external_ids = {"wikidata": qid}
        imdb_id = claim_string(entity, P_IMDB)
        if imdb_id:
            external_ids["imdb"] = imdb_id

        record = MovieRecord(
            id=qid,
            title=localized(entity, "labels", language) or f"Unknown ({qid})",
            overview=localized(entity, "descriptions", language),
            release_date=format_date(claim_date(entity, P_PUBLICATION_DATE)),
            genres=[labels.get(g, g) for g in genre_ids],
            director=labels.get(director_ids[0], director_ids[0]) if director_ids else None,
            external_ids=external_ids,
            source=self.name,
        )
        if options.include_cast:
            record.cast = [
                CastMember(id=f"wikidata-actor-{i}", name=labels.get(c, c)) for i, c in enumerate(cast_ids)
            ]
        return record

    def _search(self, query: str) -> list[BasicMovieInfo]:
        data = self._request(action="wbsearchentities", search=query, language=DEFAULT_LANGUAGE, type="item")
        hits = data.get("search")
        if not isinstance(hits, list) or not hits:
            return []

        candidates: list[tuple[str, str]] = []
        for hit in hits[:SEARCH_LIMIT]:
            if not isinstance(hit, Mapping):
                continue
            qid = safe_str(hit.get("id"))
            if qid:
                candidates.append((qid, safe_str(hit.get("label")) or qid))

        entities = self._entities([qid for qid, _ in candidates], props="claims")
        out: list[BasicMovieInfo] = []
        for qid, label in candidates:
            entity = entities.get(qid)
            if entity is None or not is_film(entity):
                continue
            out.append(
                BasicMovieInfo(
                    id=qid,
                    title=label,
                    release_date=format_date(claim_date(entity, P_PUBLICATION_DATE)),
                )
            )
        return out
