from __future__ import annotations

"""
backend/sources/open_media.py

Fuente "comunitaria" (OpenMedia). Habla el mismo protocolo que OMDb, con
nombre, prioridad y credencial propios.

Diferencia con OmdbSource: un id numérico se interpreta como id TMDB y se
traduce primero a título; si TMDB falla se busca el número tal cual.
"""

from backend.config_sources import OMDB_BASE_URL, OPEN_MEDIA_API_KEY, TMDB_API_KEY
from backend.sources.omdb import OmdbSource
from backend.sources.tmdb import TmdbApi


class OpenMediaSource(OmdbSource):
    name = "OpenMedia"
    priority = 7
    external_id_keys = ("imdb",)

    def __init__(
        self,
        api_key: str | None = OPEN_MEDIA_API_KEY,
        *,
        base_url: str = OMDB_BASE_URL,
        tmdb: TmdbApi | None = None,
    ) -> None:
        super().__init__(api_key, base_url=base_url)
        self.tmdb = tmdb or TmdbApi(TMDB_API_KEY)

    def _resolve_imdb_id(self, movie_id: str) -> str | None:
        if movie_id.startswith("tt"):
            return movie_id

        term = movie_id
        if movie_id.isdigit() and self.tmdb.api_key:
            try:
                term = self.tmdb.title_for(movie_id) or movie_id
            except Exception as exc:
                self._dbg(f"TMDB title lookup failed for {movie_id}: {exc!r}")

        hits = self._search(term)
        return hits[0].id if hits else None
