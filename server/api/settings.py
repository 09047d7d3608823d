# lectura de env vars + defaults
from __future__ import annotations

import os
from dataclasses import dataclass

_TRUE = {"1", "true", "yes", "y", "on"}


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip()
    return val if val else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE


@dataclass(frozen=True)
class Settings:
    """
    Settings del servidor HTTP (env vars).

    - CORS: si CORS_ORIGINS="*" -> allow_credentials=False (regla de navegador).
    - API_RELOAD: default "0".
    - warm_up_on_startup: lanza la ronda de probes al arrancar en vez de
      esperar a la primera petición.
    """

    host: str
    port: int
    reload: bool

    log_level: str

    cors_origins_raw: str
    cors_allow_credentials: bool

    gzip_min_size: int

    warm_up_on_startup: bool

    def cors_allow_origins(self) -> list[str]:
        raw = self.cors_origins_raw.strip()
        if raw == "*":
            return ["*"]
        return [p.strip() for p in raw.split(",") if p.strip()]

    @staticmethod
    def from_env() -> "Settings":
        cors_raw = _env_str("CORS_ORIGINS", "*")

        return Settings(
            host=_env_str("API_HOST", "127.0.0.1"),
            port=_env_int("API_PORT", 8000),
            reload=_env_bool("API_RELOAD", False),
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
            cors_origins_raw=cors_raw,
            cors_allow_credentials=cors_raw.strip() != "*",
            gzip_min_size=max(0, _env_int("GZIP_MIN_SIZE", 800)),
            warm_up_on_startup=_env_bool("API_WARM_UP", False),
        )
