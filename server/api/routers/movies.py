from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.config_sources import DEFAULT_LANGUAGE
from backend.metadata_service import MetadataService
from backend.models import FetchOptions
from server.api.deps import get_metadata_service
from server.api.services import metrics

router = APIRouter(prefix="/movies")


@router.get("/search")
def search_movies(
    q: str = Query(..., min_length=1, description="Texto libre"),
    upcoming: bool = Query(False, description="Completa con próximos estrenos si hay pocos resultados"),
    service: MetadataService = Depends(get_metadata_service),
) -> dict[str, Any]:
    metrics.inc("movie_searches_total")
    if upcoming:
        results = service.search_movies_with_upcoming(q)
    else:
        results = service.search_movies(q)

    if not results:
        metrics.inc("movie_searches_empty_total")
    return {"items": [r.to_dict() for r in results], "total": len(results), "query": q}


@router.get("/{movie_id}")
def movie_details(
    movie_id: str,
    enhanced: bool = Query(False, description="Combina datos de todas las fuentes"),
    cast: bool = Query(False),
    crew: bool = Query(False),
    videos: bool = Query(False),
    similar: bool = Query(False),
    language: str | None = Query(None, min_length=2, max_length=10),
    service: MetadataService = Depends(get_metadata_service),
) -> dict[str, Any]:
    metrics.inc("movie_lookups_total")
    options = FetchOptions(
        include_cast=cast,
        include_crew=crew,
        include_videos=videos,
        include_similar=similar,
        language=language or DEFAULT_LANGUAGE,
    )

    if enhanced:
        record = service.get_enhanced_metadata(movie_id, options)
    else:
        record = service.get_movie_metadata(movie_id, options)

    if record is None:
        metrics.inc("movie_lookups_not_found_total")
        raise HTTPException(status_code=404, detail=f"No metadata found for {movie_id}")
    return record.to_dict()
