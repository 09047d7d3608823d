# logger del servidor HTTP
from __future__ import annotations

import logging

from backend import logger as backend_logger
from server.api.settings import Settings

API_LOGGER_NAME = "movie_metadata.api"


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Configuración mínima:
    - Respetamos handlers/format de quien ejecute (uvicorn, gunicorn, etc.).
    - Ajustamos nivel global según LOG_LEVEL.
    - El fichero de log (LOGGER_FILE_ENABLED) lo gestiona backend.logger:
      servidor y orquestador escriben en el mismo.
    """
    backend_logger.get_logger()

    root = logging.getLogger()
    root.setLevel(settings.log_level)

    logger = logging.getLogger(API_LOGGER_NAME)
    logger.setLevel(settings.log_level)
    return logger
