from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response

from backend.metadata_service import MetadataService
from server.api.deps import get_metadata_service
from server.api.services import metrics

router = APIRouter()


@router.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}


@router.get("/ready")
def ready(service: MetadataService = Depends(get_metadata_service)) -> dict[str, Any]:
    """
    Readiness:
    - fuerza la ronda de probes si aún no se ha hecho (acotada por los timeouts HTTP).
    - 503 si no hay ninguna fuente disponible.
    """
    service.initialize()
    available = service.available_source_names()
    if not available:
        raise HTTPException(
            status_code=503,
            detail={"ready": False, "status": service.get_initialization_status()},
        )
    return {"ready": True, "sources": available, "ts": datetime.now(timezone.utc).isoformat()}


@router.get("/sources/status")
def sources_status(service: MetadataService = Depends(get_metadata_service)) -> dict[str, Any]:
    """Estado legible para UI; no dispara la inicialización."""
    return {
        "state": service.state.value,
        "status": service.get_initialization_status(),
        "available": service.available_source_names(),
    }


@router.get("/metrics")
def metrics_endpoint() -> Response:
    body = metrics.render_prometheus()
    return Response(content=body, media_type="text/plain; version=0.0.4")
