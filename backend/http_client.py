from __future__ import annotations

"""
backend/http_client.py

Sesión HTTP compartida por todas las fuentes de metadatos.

- requests.Session singleton (lazy-init thread-safe) con pooling + Retry de urllib3.
- SOURCE_HTTP_TIMEOUT_SECONDS (5s por defecto) actúa a dos niveles:
  - requests lo aplica por operación de socket (connect y cada read), no al total.
  - get_json() añade un plazo total: lee el cuerpo en streaming y corta con
    requests.Timeout si se supera. Un servidor que gotea bytes no la cuelga.
  El plazo se comprueba entre chunks: una operación de socket bloqueada puede
  excederlo en un timeout de socket como mucho. Los reintentos de urllib3
  consumen plazo pero no se interrumpen.
- get_json() lanza SourceHTTPError ante status != 2xx o JSON inválido.
  Los adaptadores capturan `RequestException` en su frontera.
"""

import json
import threading
from collections.abc import Mapping
from time import monotonic

import requests
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException
from urllib3.util.retry import Retry

from backend.config_sources import (
    SOURCE_HTTP_POOL_SIZE,
    SOURCE_HTTP_RETRY_BACKOFF_FACTOR,
    SOURCE_HTTP_RETRY_TOTAL,
    SOURCE_HTTP_TIMEOUT_SECONDS,
    SOURCE_HTTP_USER_AGENT,
)


class SourceHTTPError(RequestException):
    """Respuesta no-2xx o cuerpo no JSON de un proveedor."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


_SESSION: requests.Session | None = None
_SESSION_LOCK = threading.Lock()


def _get_session() -> requests.Session:
    """
    Singleton requests.Session con retries y pooling.

    El pool se dimensiona para la ronda de probes concurrentes del orquestador
    (una conexión por fuente como mínimo).
    """
    global _SESSION
    if _SESSION is not None:
        return _SESSION

    with _SESSION_LOCK:
        if _SESSION is not None:
            return _SESSION

        session = requests.Session()

        retries = Retry(
            total=int(SOURCE_HTTP_RETRY_TOTAL),
            backoff_factor=float(SOURCE_HTTP_RETRY_BACKOFF_FACTOR),
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(
            max_retries=retries,
            pool_connections=int(SOURCE_HTTP_POOL_SIZE),
            pool_maxsize=int(SOURCE_HTTP_POOL_SIZE),
        )
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        session.headers.update(
            {
                "User-Agent": SOURCE_HTTP_USER_AGENT,
                "Accept": "application/json,text/plain,*/*",
            }
        )

        _SESSION = session
        return session


_CHUNK_SIZE = 16 * 1024


def _read_body(resp: requests.Response, deadline: float, url: str) -> bytes:
    body = bytearray()
    if monotonic() > deadline:
        raise requests.Timeout(f"Deadline exceeded before reading {url}")
    for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
        body.extend(chunk)
        if monotonic() > deadline:
            raise requests.Timeout(f"Deadline exceeded while reading {url}")
    return bytes(body)


def get_json(
    url: str,
    *,
    params: Mapping[str, object] | None = None,
    timeout: float | None = None,
) -> object:
    """
    GET + JSON con plazo total `timeout` (ver docstring del módulo).

    Raises:
      - SourceHTTPError si status != 2xx o el cuerpo no es JSON.
      - requests.Timeout si se agota el plazo total.
      - requests.RequestException (conexión...) tal cual.
    """
    t = float(timeout) if timeout is not None else float(SOURCE_HTTP_TIMEOUT_SECONDS)
    clean_params = {k: str(v) for k, v in (params or {}).items() if v is not None}
    deadline = monotonic() + t

    resp = _get_session().get(url, params=clean_params, timeout=t, stream=True)
    try:
        body = _read_body(resp, deadline, url)
    finally:
        resp.close()

    if not (200 <= resp.status_code < 300):
        text = body.decode("utf-8", errors="replace")[:200]
        raise SourceHTTPError(f"HTTP {resp.status_code} for {url}: {text}", status_code=resp.status_code)

    try:
        return json.loads(body)
    except ValueError as exc:
        raise SourceHTTPError(f"Invalid JSON from {url}: {exc!r}", status_code=resp.status_code) from exc
