from __future__ import annotations

from backend.config_base import (
    _cap_float_min,
    _cap_int,
    _get_env_float,
    _get_env_int,
    _get_env_secret,
    _get_env_str,
)

# ============================================================
# Credenciales por proveedor
# ============================================================

TMDB_API_KEY: str | None = _get_env_secret("TMDB_API_KEY", "NEXT_PUBLIC_TMDB_API_KEY")
OMDB_API_KEY: str | None = _get_env_secret("OMDB_API_KEY")
MOVIELENS_API_KEY: str | None = _get_env_secret("MOVIELENS_API_KEY", "TMDB_API_KEY", "NEXT_PUBLIC_TMDB_API_KEY")
TMPDB_API_KEY: str | None = _get_env_secret("TMPDB_API_KEY", "TMDB_API_KEY", "NEXT_PUBLIC_TMDB_API_KEY")
YOUTUBE_API_KEY: str | None = _get_env_secret("YOUTUBE_API_KEY")
OPEN_MEDIA_API_KEY: str | None = _get_env_secret("OPEN_MEDIA_API_KEY", "OMDB_API_KEY")

# ============================================================
# Endpoints
# ============================================================

TMDB_BASE_URL: str = _get_env_str("TMDB_BASE_URL", "https://api.themoviedb.org/3") or "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE_URL: str = _get_env_str("TMDB_IMAGE_BASE_URL", "https://image.tmdb.org/t/p/") or "https://image.tmdb.org/t/p/"
OMDB_BASE_URL: str = _get_env_str("OMDB_BASE_URL", "https://www.omdbapi.com/") or "https://www.omdbapi.com/"
YOUTUBE_BASE_URL: str = (
    _get_env_str("YOUTUBE_BASE_URL", "https://www.googleapis.com/youtube/v3") or "https://www.googleapis.com/youtube/v3"
)
WIKIDATA_API_URL: str = _get_env_str("WIKIDATA_API_URL", "https://www.wikidata.org/w/api.php") or "https://www.wikidata.org/w/api.php"

# ============================================================
# HTTP (timeouts + retries + UA)
# ============================================================

SOURCE_HTTP_TIMEOUT_SECONDS: float = _cap_float_min(
    "SOURCE_HTTP_TIMEOUT_SECONDS",
    _get_env_float("SOURCE_HTTP_TIMEOUT_SECONDS", 5.0),
    min_v=0.5,
)

# Por defecto sin reintentos: el fallback entre fuentes ya cubre los fallos transitorios.
SOURCE_HTTP_RETRY_TOTAL: int = _cap_int(
    "SOURCE_HTTP_RETRY_TOTAL",
    _get_env_int("SOURCE_HTTP_RETRY_TOTAL", 0),
    min_v=0,
    max_v=5,
)
SOURCE_HTTP_RETRY_BACKOFF_FACTOR: float = _cap_float_min(
    "SOURCE_HTTP_RETRY_BACKOFF_FACTOR",
    _get_env_float("SOURCE_HTTP_RETRY_BACKOFF_FACTOR", 0.3),
    min_v=0.0,
)
SOURCE_HTTP_POOL_SIZE: int = _cap_int(
    "SOURCE_HTTP_POOL_SIZE",
    _get_env_int("SOURCE_HTTP_POOL_SIZE", 16),
    min_v=1,
    max_v=64,
)
SOURCE_HTTP_USER_AGENT: str = (
    _get_env_str("SOURCE_HTTP_USER_AGENT", "Movie-Metadata-Hub/1.0 (local)") or "Movie-Metadata-Hub/1.0 (local)"
)

# ============================================================
# Orquestador
# ============================================================

DEFAULT_LANGUAGE: str = _get_env_str("DEFAULT_LANGUAGE", "en") or "en"

PROBE_MAX_WORKERS: int = _cap_int(
    "PROBE_MAX_WORKERS",
    _get_env_int("PROBE_MAX_WORKERS", 8),
    min_v=1,
    max_v=32,
)
