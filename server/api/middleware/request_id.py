from __future__ import annotations

"""
server/api/middleware/request_id.py

Middleware por request:
- Propaga X-Request-ID (o genera uno).
- Cuenta requests y respuestas 4xx/5xx.
- Loguea método, path, status y duración.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from server.api.logging_config import configure_logging
from server.api.services import metrics
from server.api.settings import Settings

REQUEST_ID_HEADER = "X-Request-ID"

CallNext = Callable[[Request], Awaitable[Response]]
Middleware = Callable[[Request, CallNext], Awaitable[Response]]


def _status_counter(status_code: int) -> str | None:
    if 400 <= status_code < 500:
        return "http_responses_4xx_total"
    if status_code >= 500:
        return "http_responses_5xx_total"
    return None


def build_request_id_middleware(settings: Settings) -> Middleware:
    logger = configure_logging(settings)

    async def middleware(request: Request, call_next: CallNext) -> Response:
        start = time.monotonic()
        req_id = (request.headers.get(REQUEST_ID_HEADER) or "").strip() or uuid.uuid4().hex
        request.state.request_id = req_id

        metrics.inc("http_requests_total")

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = req_id
            return response
        finally:
            counter = _status_counter(status_code)
            if counter:
                metrics.inc(counter)
            logger.info(
                "request",
                extra={
                    "request_id": req_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status": status_code,
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )

    return middleware
