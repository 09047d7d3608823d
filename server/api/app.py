from __future__ import annotations

import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from server.api.deps import get_metadata_service, get_settings
from server.api.middleware import build_exception_handler, build_request_id_middleware
from server.api.routers.health import router as health_router
from server.api.routers.movies import router as movies_router
from server.api.routers.overrides import router as overrides_router
from server.api.settings import Settings


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    warm_up = settings.warm_up_on_startup

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.warm_up_thread = None
        if warm_up:
            # Probes en segundo plano: el arranque no espera a los proveedores.
            provider = app.dependency_overrides.get(get_metadata_service, get_metadata_service)
            thread = threading.Thread(target=provider().initialize, name="metadata-warm-up", daemon=True)
            thread.start()
            app.state.warm_up_thread = thread
        yield

    app = FastAPI(title="Movie Metadata Hub API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(GZipMiddleware, minimum_size=settings.gzip_min_size)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.middleware("http")(build_request_id_middleware(settings))
    app.add_exception_handler(Exception, build_exception_handler(settings))

    app.include_router(health_router)
    app.include_router(movies_router)
    app.include_router(overrides_router)

    return app


app = create_app()
