from __future__ import annotations

"""
backend/metadata_service.py

Orquestador de fuentes de metadatos.

Estados
-------
UNINITIALIZED -> INITIALIZING -> READY

- La primera llamada pública arranca la inicialización.
- Llamadas concurrentes durante INITIALIZING comparten la misma ronda
  (un Future protegido por un Lock): solo se ejecuta UNA ronda de probes.
- La ronda lanza `is_available()` de todas las fuentes en un ThreadPoolExecutor
  y espera a todas (no hay cortocircuito). Una excepción cuenta como "no disponible".
- TMDB y CustomDB se fuerzan como disponibles tras la ronda.
- Un error inesperado en la inicialización NO es fatal: se degrada a
  {TMDB, CustomDB} (o a la primera fuente registrada) y se llega a READY igual.

Operaciones
-----------
- get_movie_metadata          primera fuente (por prioridad) con resultado, saneado
- search_movies               primera fuente con resultados no vacíos
- search_movies_with_upcoming completa búsquedas cortas con próximos estrenos de TMDB
- get_enhanced_metadata       registro primario + merge de las demás fuentes
- upsert_override / remove_override  -> CustomDB

Ninguna operación lanza por fallos de fuentes: lo peor que se observa es None / [].
"""

import threading
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Final

from backend import logger
from backend.config_sources import PROBE_MAX_WORKERS
from backend.merge import merge, sanitize
from backend.models import BasicMovieInfo, FetchOptions, MovieRecord
from backend.sources import CustomDbSource, MetadataSource, build_default_sources

FORCED_SOURCES: Final[tuple[str, ...]] = ("TMDB", "CustomDB")

UPCOMING_MIN_RESULTS: Final[int] = 5
UPCOMING_MIN_QUERY_LEN: Final[int] = 3


class ServiceState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


def _dbg(msg: object) -> None:
    logger.debug_ctx("METADATA", msg)


def _cross_reference_id(record: MovieRecord, source: MetadataSource, fallback: str | int) -> str | int:
    """Primer id conocido en external_ids que la fuente acepta; si no hay ninguno, el id de entrada."""
    for key in source.external_id_keys:
        known = record.external_ids.get(key)
        if known:
            return known
    return fallback


class MetadataService:
    def __init__(
        self,
        sources: Sequence[MetadataSource] | None = None,
        *,
        probe_max_workers: int = PROBE_MAX_WORKERS,
    ) -> None:
        registered = list(sources) if sources is not None else build_default_sources()
        # sorted() es estable: a igual prioridad manda el orden de registro.
        self._sources: list[MetadataSource] = sorted(registered, key=lambda s: s.priority)
        self._available: list[MetadataSource] = []
        self._probe_max_workers = max(1, int(probe_max_workers))

        self._lock = threading.Lock()
        self._init_future: Future[None] | None = None
        self._state = ServiceState.UNINITIALIZED
        self._status = "Not initialized"

        self._custom_db: CustomDbSource | None = next(
            (s for s in self._sources if isinstance(s, CustomDbSource)), None
        )

    # =========================================================================
    # Inicialización (single-flight)
    # =========================================================================

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def sources(self) -> list[MetadataSource]:
        return list(self._sources)

    def get_initialization_status(self) -> str:
        return self._status

    def available_source_names(self) -> list[str]:
        """Nombres disponibles (vacío hasta READY). No dispara la inicialización."""
        if self._state is not ServiceState.READY:
            return []
        return [s.name for s in self._available]

    def initialize(self) -> None:
        with self._lock:
            future = self._init_future
            owner = future is None
            if future is None:
                future = Future()
                self._init_future = future
                self._state = ServiceState.INITIALIZING

        if owner:
            try:
                self._initialize()
            finally:
                self._state = ServiceState.READY
                future.set_result(None)

        future.result()

    def _probe_one(self, source: MetadataSource) -> bool:
        self._status = f"Checking availability of {source.name}..."
        try:
            ok = bool(source.is_available())
        except Exception as exc:
            logger.warning(f"Error checking availability for {source.name}: {exc!r}")
            return False
        logger.info(f"{source.name} availability: {ok}")
        return ok

    def _initialize(self) -> None:
        try:
            self._status = "Initializing metadata service..."
            logger.info(self._status)

            workers = min(self._probe_max_workers, max(1, len(self._sources)))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="probe") as executor:
                futures = [(s, executor.submit(self._probe_one, s)) for s in self._sources]
                results = [(s, f.result()) for s, f in futures]

            available = [s for s, ok in results if ok]
            for forced in FORCED_SOURCES:
                if not any(s.name == forced for s in available):
                    match = next((s for s in self._sources if s.name == forced), None)
                    if match is not None:
                        logger.info(f"Forcing {forced} to be available as a fallback")
                        available.append(match)

            self._available = sorted(available, key=self._sources.index)
            names = ", ".join(s.name for s in self._available)
            self._status = f"Metadata service ready with sources: {names}"
            logger.info(f"Metadata service initialized with {len(self._available)} available sources: {names}")

        except Exception as exc:
            logger.error(f"Failed to initialize metadata service: {exc!r}")
            fallback = [s for s in self._sources if s.name in FORCED_SOURCES]
            if not fallback and self._sources:
                fallback = [self._sources[0]]
            self._available = fallback
            names = ", ".join(s.name for s in fallback)
            self._status = f"Initialization error. Using fallback sources: {names}"

    def _ensure_ready(self) -> list[MetadataSource]:
        if self._state is not ServiceState.READY:
            self.initialize()
        return list(self._available)

    # =========================================================================
    # Fetch
    # =========================================================================

    def _fetch_primary(self, movie_id: str | int, options: FetchOptions) -> tuple[MovieRecord, MetadataSource] | None:
        available = self._ensure_ready()
        if not available:
            logger.error("No metadata sources available")
            return None

        errors: list[str] = []
        for source in available:
            try:
                _dbg(f"fetching {movie_id!r} from {source.name}")
                record = source.get_movie_metadata(movie_id, options)
            except Exception as exc:
                errors.append(f"{source.name}: {exc!r}")
                continue
            if record is not None:
                _dbg(f"{source.name} returned {record.title!r}")
                return record, source

        if errors:
            logger.warning(f"All metadata sources failed for {movie_id!r}: {'; '.join(errors)}")
        else:
            _dbg(f"no source found {movie_id!r}")
        return None

    def get_movie_metadata(self, movie_id: str | int, options: FetchOptions | None = None) -> MovieRecord | None:
        found = self._fetch_primary(movie_id, options or FetchOptions())
        if found is None:
            return None
        record, _ = found
        return sanitize(record)

    def get_enhanced_metadata(self, movie_id: str | int, options: FetchOptions | None = None) -> MovieRecord | None:
        opts = options or FetchOptions()
        found = self._fetch_primary(movie_id, opts)
        if found is None:
            _dbg(f"no primary metadata for {movie_id!r}")
            return None

        record, producer = found
        for source in self._ensure_ready():
            if source is producer:
                continue

            source_id = _cross_reference_id(record, source, movie_id)

            try:
                _dbg(f"enhancing with {source.name} using {source_id!r}")
                secondary = source.get_movie_metadata(source_id, opts)
            except Exception as exc:
                _dbg(f"enhance with {source.name} failed: {exc!r}")
                continue
            if secondary is not None:
                merge(record, secondary)

        return sanitize(record)

    # =========================================================================
    # Search
    # =========================================================================

    def search_movies(self, query: str) -> list[BasicMovieInfo]:
        available = self._ensure_ready()
        if not available:
            logger.error("No metadata sources available")
            return []

        for source in available:
            try:
                results = source.search_movies(query)
            except Exception as exc:
                _dbg(f"search with {source.name} failed: {exc!r}")
                continue
            if results:
                _dbg(f"found {len(results)} results with {source.name}")
                return results

        _dbg(f"no results for {query!r} with any source")
        return []

    def search_movies_with_upcoming(self, query: str) -> list[BasicMovieInfo]:
        results = self.search_movies(query)
        needle = (query or "").strip().lower()
        if len(results) >= UPCOMING_MIN_RESULTS or len(needle) < UPCOMING_MIN_QUERY_LEN:
            return results

        tmdb = next((s for s in self._ensure_ready() if s.name == "TMDB"), None)
        get_upcoming = getattr(tmdb, "get_upcoming_movies", None)
        if not callable(get_upcoming):
            return results

        try:
            upcoming = get_upcoming()
        except Exception as exc:
            _dbg(f"upcoming failed: {exc!r}")
            return results

        seen = {m.id for m in results}
        extra: list[BasicMovieInfo] = []
        for movie in upcoming:
            if needle in movie.title.lower() and movie.id not in seen:
                seen.add(movie.id)
                extra.append(movie)
        return results + extra

    # =========================================================================
    # Overrides (CustomDB)
    # =========================================================================

    def upsert_override(self, record: MovieRecord) -> None:
        if self._custom_db is None:
            raise LookupError("No local override store registered")
        self._custom_db.upsert(record)

    def remove_override(self, movie_id: str | int) -> bool:
        if self._custom_db is None:
            return False
        return self._custom_db.remove(movie_id)
