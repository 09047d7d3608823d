from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from backend.metadata_service import MetadataService
from backend.models import MovieRecord
from server.api.deps import get_metadata_service
from server.api.services import metrics

router = APIRouter(prefix="/overrides")


@router.put("/{movie_id}")
def upsert_override(
    movie_id: str,
    payload: dict[str, Any] = Body(...),
    service: MetadataService = Depends(get_metadata_service),
) -> dict[str, Any]:
    """El id de la ruta manda sobre el del body."""
    if not str(payload.get("title") or "").strip():
        raise HTTPException(status_code=422, detail="'title' is required")

    try:
        record = MovieRecord.from_dict({**payload, "id": movie_id})
    except (AttributeError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=f"Invalid movie record: {exc}")

    try:
        service.upsert_override(record)
    except LookupError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    metrics.inc("override_upserts_total")
    return {"id": movie_id, "stored": True}


@router.delete("/{movie_id}")
def remove_override(
    movie_id: str,
    service: MetadataService = Depends(get_metadata_service),
) -> dict[str, Any]:
    if not service.remove_override(movie_id):
        raise HTTPException(status_code=404, detail=f"No override for {movie_id}")
    metrics.inc("override_removals_total")
    return {"id": movie_id, "removed": True}
