from __future__ import annotations

from backend.sources.base import MetadataSource
from backend.sources.custom_db import CustomDbSource
from backend.sources.movielens import MovieLensSource
from backend.sources.omdb import OmdbSource
from backend.sources.open_media import OpenMediaSource
from backend.sources.tmdb import TmdbSource
from backend.sources.tmpdb import TmpdbSource
from backend.sources.wikidata import WikidataSource
from backend.sources.youtube import YouTubeSource

__all__ = [
    "CustomDbSource",
    "MetadataSource",
    "MovieLensSource",
    "OmdbSource",
    "OpenMediaSource",
    "TmdbSource",
    "TmpdbSource",
    "WikidataSource",
    "YouTubeSource",
    "build_default_sources",
]


def build_default_sources() -> list[MetadataSource]:
    """Registro por defecto: las 8 fuentes con la configuración del entorno."""
    return [
        CustomDbSource(),
        TmdbSource(),
        OmdbSource(),
        MovieLensSource(),
        TmpdbSource(),
        YouTubeSource(),
        WikidataSource(),
        OpenMediaSource(),
    ]
