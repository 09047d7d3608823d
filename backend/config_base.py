"""
backend/config_base.py

- Carga .env UNA vez
- Helpers de parseo (_get_env_*, _get_env_secret, _cap_*)
- Flags globales (DEBUG_MODE/SILENT_MODE/LOG_LEVEL/HTTP_DEBUG)
- LOGGER_FILE_* para el logger central

Este módulo NO debe importar config_sources.py para evitar ciclos.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

# No sobre-escribimos env vars ya definidas en el proceso.
load_dotenv(override=False)

from backend import logger as _logger  # noqa: E402


BASE_DIR: Final[Path] = Path(__file__).resolve().parent
PROJECT_DIR: Final[Path] = BASE_DIR.parent


# ============================================================
# Helpers: parseo tolerante de env vars
# ============================================================

_TRUE_SET: Final[set[str]] = {"1", "true", "t", "yes", "y", "on"}
_FALSE_SET: Final[set[str]] = {"0", "false", "f", "no", "n", "off"}


def _clean_env_raw(v: object | None) -> str | None:
    """
    None -> None; str -> strip() sin comillas exteriores.
    Si tras limpiar queda vacío => None.
    """
    if v is None:
        return None
    s = str(v).strip()
    if not s:
        return None
    if len(s) >= 2 and (s[0] == s[-1]) and s[0] in ("'", '"'):
        s = s[1:-1].strip()
    return s or None


def _get_env_str(name: str, default: str | None = None) -> str | None:
    v = _clean_env_raw(os.getenv(name))
    return default if v is None else v


def _get_env_int(name: str, default: int) -> int:
    v = _clean_env_raw(os.getenv(name))
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        _logger.warning(f"Invalid int for {name!r}: {v!r}, using default {default}", always=True)
        return default


def _get_env_float(name: str, default: float) -> float:
    v = _clean_env_raw(os.getenv(name))
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        _logger.warning(f"Invalid float for {name!r}: {v!r}, using default {default}", always=True)
        return default


def _get_env_bool(name: str, default: bool) -> bool:
    v = _clean_env_raw(os.getenv(name))
    if v is None:
        return default
    s = v.lower()
    if s in _TRUE_SET:
        return True
    if s in _FALSE_SET:
        return False
    _logger.warning(f"Invalid bool for {name!r}: {v!r}, using default {default}", always=True)
    return default


_SECRET_PLACEHOLDER_PREFIXES: Final[tuple[str, ...]] = ("YOUR_", "CHANGE_ME", "<")


def _get_env_secret(name: str, *fallbacks: str) -> str | None:
    """
    Credencial de proveedor: primera env var con valor real entre `name` y `fallbacks`.

    Los placeholders de plantilla (.env.example) cuentan como ausentes.
    """
    for env_name in (name, *fallbacks):
        v = _clean_env_raw(os.getenv(env_name))
        if v is None:
            continue
        if v.upper().startswith(_SECRET_PLACEHOLDER_PREFIXES):
            _logger.debug_ctx("CONFIG", f"{env_name} looks like a placeholder; ignoring")
            continue
        return v
    return None


def _cap_int(name: str, value: int, *, min_v: int, max_v: int) -> int:
    if value < min_v:
        _logger.warning(f"{name} < {min_v}; forcing to {min_v}", always=True)
        return min_v
    if value > max_v:
        _logger.warning(f"{name} too high; capping to {max_v}", always=True)
        return max_v
    return value


def _cap_float_min(name: str, value: float, *, min_v: float) -> float:
    if value < min_v:
        _logger.warning(f"{name} < {min_v}; forcing to {min_v}", always=True)
        return min_v
    return value


# ============================================================
# MODO DE EJECUCIÓN
# ============================================================

DEBUG_MODE: bool = _get_env_bool("DEBUG_MODE", False)
SILENT_MODE: bool = _get_env_bool("SILENT_MODE", False)

HTTP_DEBUG: bool = _get_env_bool("HTTP_DEBUG", False)
LOG_LEVEL: str | None = _get_env_str("LOG_LEVEL", None)


# ============================================================
# LOGGER (fichero opcional por ejecución)
# ============================================================

LOGGER_FILE_ENABLED: bool = _get_env_bool("LOGGER_FILE_ENABLED", False)

_LOGGER_FILE_DIR_RAW: Final[str] = _get_env_str("LOGGER_FILE_DIR", "logs") or "logs"
_LOGGER_FILE_DIR_CANDIDATE = Path(_LOGGER_FILE_DIR_RAW)
LOGGER_FILE_DIR: Final[Path] = (
    _LOGGER_FILE_DIR_CANDIDATE if _LOGGER_FILE_DIR_CANDIDATE.is_absolute() else (PROJECT_DIR / _LOGGER_FILE_DIR_CANDIDATE)
)


def _build_logger_file_path() -> Path | None:
    """
    Path del log de esta ejecución.

    Si no viene explícito se calcula una vez y se congela en os.environ,
    así los workers de uvicorn (reload) escriben en el mismo fichero.
    """
    if not LOGGER_FILE_ENABLED:
        return None

    explicit = _clean_env_raw(os.getenv("LOGGER_FILE_PATH"))
    if explicit:
        p = Path(explicit)
        return (p if p.is_absolute() else (PROJECT_DIR / p)).resolve()

    ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    resolved = (LOGGER_FILE_DIR / f"run_{ts}_{os.getpid()}.log").resolve()
    os.environ["LOGGER_FILE_PATH"] = str(resolved)
    return resolved


LOGGER_FILE_PATH: Path | None = _build_logger_file_path()
