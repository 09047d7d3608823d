from __future__ import annotations

"""
backend/sources/base.py

Contrato común de las fuentes de metadatos.

Cada fuente implementa tres capacidades:
- get_movie_metadata(id, options) -> MovieRecord | None
- search_movies(query)            -> list[BasicMovieInfo]
- is_available()                  -> bool

Las subclases implementan `_fetch` / `_search` (pueden lanzar). La frontera
pública captura cualquier excepción y la convierte en None / []:
el orquestador nunca ve una excepción de red ni de parseo.
"""

import math
from abc import ABC, abstractmethod
from datetime import datetime
from typing import ClassVar, Final

from backend import logger
from backend.models import BasicMovieInfo, FetchOptions, MovieRecord

_DATE_FORMATS: Final[tuple[str, ...]] = (
    "%Y-%m-%d",
    "%d %b %Y",
    "%d %B %Y",
    "%Y-%m",
    "%Y",
)


# ============================================================
# Helpers de parseo compartidos por los adaptadores
# ============================================================


def safe_str(value: object) -> str | None:
    """str no vacío o None. "N/A" (OMDb) cuenta como ausente."""
    if not isinstance(value, str):
        return None
    v = value.strip()
    if not v or v == "N/A":
        return None
    return v


def safe_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) else int(value)
    if isinstance(value, str):
        s = value.strip().replace(",", "")
        try:
            return int(s)
        except ValueError:
            return None
    return None


def safe_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def format_date(value: object) -> str | None:
    """
    Normaliza una fecha a ISO (YYYY-MM-DD).

    - "2010-07-16" / "16 Jul 2010" / "2010" -> ISO ("2010" -> "2010-01-01")
    - "1994–1996" (rango OMDb) -> primer año
    - no parseable -> el texto tal cual
    """
    text = safe_str(value)
    if text is None:
        return None

    candidate = text.split("T", 1)[0]
    if len(candidate) > 4 and candidate[:4].isdigit() and candidate[4] != "-":
        candidate = candidate[:4]

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).date().isoformat()
        except ValueError:
            continue
    return text


def normalize_rating(rating: float, max_rating: float = 10.0) -> float:
    """Reescala una nota de [0, max_rating] a [0, 10]."""
    return (float(rating) / float(max_rating)) * 10.0


# ============================================================
# Clase base
# ============================================================


class MetadataSource(ABC):
    name: ClassVar[str]
    priority: ClassVar[int]

    # Claves de MovieRecord.external_ids que esta fuente sabe resolver, por preferencia.
    external_id_keys: ClassVar[tuple[str, ...]] = ()

    requires_api_key: ClassVar[bool] = True

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} priority={self.priority}>"

    @property
    def is_configured(self) -> bool:
        return (not self.requires_api_key) or bool(self.api_key)

    def _dbg(self, msg: object) -> None:
        logger.debug_ctx(self.name, msg)

    # ---------------- implementación por fuente (puede lanzar) ----------------

    @abstractmethod
    def _fetch(self, movie_id: str, options: FetchOptions) -> MovieRecord | None: ...

    @abstractmethod
    def _search(self, query: str) -> list[BasicMovieInfo]: ...

    def _probe(self) -> bool:
        """Probe por defecto: una búsqueda trivial que no lance."""
        self._search("test")
        return True

    # ---------------- frontera pública (nunca lanza) ----------------

    def get_movie_metadata(self, movie_id: str | int, options: FetchOptions | None = None) -> MovieRecord | None:
        if not self.is_configured:
            self._dbg("API key not configured; skipping fetch")
            return None

        key = str(movie_id).strip()
        if not key:
            return None

        try:
            return self._fetch(key, options or FetchOptions())
        except Exception as exc:
            self._dbg(f"fetch failed for {key!r}: {exc!r}")
            return None

    def search_movies(self, query: str) -> list[BasicMovieInfo]:
        if not self.is_configured:
            self._dbg("API key not configured; skipping search")
            return []

        q = (query or "").strip()
        if not q:
            return []

        try:
            return self._search(q)
        except Exception as exc:
            self._dbg(f"search failed for {q!r}: {exc!r}")
            return []

    def is_available(self) -> bool:
        if not self.is_configured:
            logger.info(f"{self.name} not available: API key not configured")
            return False

        try:
            return bool(self._probe())
        except Exception as exc:
            logger.warning(f"{self.name} not available: {exc!r}")
            return False
