from __future__ import annotations

"""
Handles de proceso para los routers.

Se construyen una sola vez y se inyectan con Depends(); los tests los
sustituyen con app.dependency_overrides.
"""

import threading

from backend.metadata_service import MetadataService
from server.api.settings import Settings

_SETTINGS = Settings.from_env()

_SERVICE: MetadataService | None = None
_SERVICE_LOCK = threading.Lock()


def get_settings() -> Settings:
    return _SETTINGS


def get_metadata_service() -> MetadataService:
    global _SERVICE
    if _SERVICE is not None:
        return _SERVICE
    with _SERVICE_LOCK:
        if _SERVICE is None:
            _SERVICE = MetadataService()
        return _SERVICE
