from __future__ import annotations

from server.api.middleware.errors import build_exception_handler
from server.api.middleware.request_id import REQUEST_ID_HEADER, build_request_id_middleware

__all__ = ["REQUEST_ID_HEADER", "build_exception_handler", "build_request_id_middleware"]
