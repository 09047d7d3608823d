from __future__ import annotations

"""
backend/logger.py

Logger central del agregador (fachada sobre `logging`).

API estable
-----------
- debug / info / warning / error
- progress (siempre visible, sin timestamps)
- debug_ctx(tag, msg) (debug contextual por fuente: "TMDB", "OMDB", "SERVICE"...)

Política
--------
- SILENT_MODE=True: suprime debug/info/warning (salvo always=True). `error()` siempre emite.
- DEBUG_MODE=True: habilita debug_ctx; en SILENT+DEBUG sale por `progress`.
- El logging nunca debe romper una llamada de metadatos.

Los flags se leen de backend.config_base vía sys.modules (si ya está importado),
para no crear imports circulares: config_base importa este módulo.
"""

import logging
import os
import sys
import threading
from types import ModuleType, TracebackType
from typing import Final, Mapping, TypedDict

from typing_extensions import TypeAlias, Unpack

_ExcInfoTuple: TypeAlias = tuple[type[BaseException], BaseException, TracebackType | None]
ExcInfo: TypeAlias = bool | _ExcInfoTuple | BaseException | None


class LogKwargs(TypedDict, total=False):
    """Subconjunto de kwargs de logging.Logger.* que reenviamos."""

    exc_info: ExcInfo
    stack_info: bool
    stacklevel: int
    extra: Mapping[str, object] | None


LOGGER_NAME: Final[str] = "movie_metadata"

_LOGGER: logging.Logger | None = None
_CONFIGURED: bool = False

_FILE_HANDLER_TAG: Final[str] = "_movie_metadata_file_handler"
_PROGRESS_FILE_LOCK = threading.Lock()

_NOISY_LOGGERS: Final[tuple[str, ...]] = (
    "urllib3",
    "urllib3.connectionpool",
    "requests",
    "requests.packages.urllib3",
)


# ============================================================================
# FLAGS (sin importar backend.config_base directamente)
# ============================================================================


def _safe_get_cfg() -> ModuleType | None:
    mod = sys.modules.get("backend.config_base")
    return mod if isinstance(mod, ModuleType) else None


def _cfg_bool(name: str, default: bool = False) -> bool:
    cfg = _safe_get_cfg()
    if cfg is None:
        return default
    try:
        return bool(getattr(cfg, name, default))
    except Exception:
        return default


def _cfg_str(name: str, default: str | None = None) -> str | None:
    cfg = _safe_get_cfg()
    if cfg is None:
        return default
    v = getattr(cfg, name, default)
    if v is None:
        return None
    s = str(v).strip()
    return s or default


def is_silent_mode() -> bool:
    return _cfg_bool("SILENT_MODE", False)


def is_debug_mode() -> bool:
    return _cfg_bool("DEBUG_MODE", False)


# ============================================================================
# NIVEL + LOGGERS EXTERNOS
# ============================================================================


def _resolve_level_from_config() -> int:
    """
    Prioridad:
      1) LOG_LEVEL explícito
      2) DEBUG_MODE
      3) INFO
    """
    if _safe_get_cfg() is None:
        return logging.INFO

    lvl = _cfg_str("LOG_LEVEL", None)
    if isinstance(lvl, str) and lvl.strip():
        mapped = {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "WARN": logging.WARNING,
            "ERROR": logging.ERROR,
            "CRITICAL": logging.CRITICAL,
        }.get(lvl.strip().upper())
        if mapped is not None:
            return mapped

    if is_debug_mode():
        return logging.DEBUG
    return logging.INFO


def _configure_external_loggers() -> None:
    """urllib3/requests a WARNING salvo HTTP_DEBUG=True."""
    if _cfg_bool("HTTP_DEBUG", False):
        return
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# ============================================================================
# FILE LOGGING (opcional)
# ============================================================================


def _file_logging_path() -> str | None:
    """ENV LOGGER_FILE_PATH tiene prioridad sobre config_base.LOGGER_FILE_PATH."""
    env_p = (os.getenv("LOGGER_FILE_PATH") or "").strip()
    if env_p:
        return env_p
    return _cfg_str("LOGGER_FILE_PATH", None)


def _ensure_file_handler(root: logging.Logger, *, level: int) -> None:
    if not _cfg_bool("LOGGER_FILE_ENABLED", False):
        return

    path = _file_logging_path()
    if not path:
        return

    for h in root.handlers:
        if getattr(h, _FILE_HANDLER_TAG, False):
            h.setLevel(level)
            return

    try:
        dir_name = os.path.dirname(path)
        if dir_name:
            os.makedirs(dir_name, exist_ok=True)
        fh = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        setattr(fh, _FILE_HANDLER_TAG, True)
        root.addHandler(fh)
    except OSError:
        return


def _ensure_configured() -> logging.Logger:
    """Inicializa logging de forma idempotente y devuelve el logger principal."""
    global _LOGGER, _CONFIGURED

    level = _resolve_level_from_config()
    root = logging.getLogger()

    if not _CONFIGURED:
        if not root.handlers:
            logging.basicConfig(
                level=level,
                format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            )
        _LOGGER = logging.getLogger(LOGGER_NAME)
        _CONFIGURED = True

    root.setLevel(level)
    _configure_external_loggers()
    _ensure_file_handler(root, level=level)

    assert _LOGGER is not None
    return _LOGGER


def get_logger() -> logging.Logger:
    return _ensure_configured()


def _should_log(*, always: bool = False) -> bool:
    if always:
        return True
    return not is_silent_mode()


# ============================================================================
# PROGRESO (NO logging)
# ============================================================================


def progress(message: str) -> None:
    """Línea siempre visible (ignora SILENT_MODE). Se duplica a fichero si procede."""
    try:
        sys.stdout.write(f"{message}\n")
        sys.stdout.flush()
    except Exception:
        pass

    if not _cfg_bool("LOGGER_FILE_ENABLED", False):
        return
    path = _file_logging_path()
    if not path:
        return
    try:
        with _PROGRESS_FILE_LOCK:
            with open(path, "a", encoding="utf-8") as f:
                f.write(f"{message}\n")
    except OSError:
        return


# ============================================================================
# API PÚBLICA
# ============================================================================


def debug(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if not _should_log(always=always):
        return
    try:
        _ensure_configured().debug(msg, *args, **kwargs)
    except Exception:
        pass


def info(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if not _should_log(always=always):
        return
    try:
        _ensure_configured().info(msg, *args, **kwargs)
    except Exception:
        pass


def warning(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if not _should_log(always=always):
        return
    try:
        _ensure_configured().warning(msg, *args, **kwargs)
    except Exception:
        pass


def error(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    """ERROR siempre se emite (ignora SILENT_MODE)."""
    try:
        _ensure_configured().error(msg, *args, **kwargs)
    except Exception:
        try:
            print(msg)
        except Exception:
            pass


def debug_ctx(tag: str, msg: object) -> None:
    """
    Debug contextual con tag.

    - DEBUG_MODE=False -> no-op
    - DEBUG_MODE=True:
        * SILENT_MODE=True  -> progress("[TAG][DEBUG] ...")
        * SILENT_MODE=False -> info("[TAG][DEBUG] ...")
    """
    if not is_debug_mode():
        return

    t = (tag or "DEBUG").strip().upper()
    text = f"[{t}][DEBUG] {msg}"
    if is_silent_mode():
        progress(text)
    else:
        info(text)
