from __future__ import annotations

"""Contadores en proceso, expuestos en texto Prometheus por /metrics."""

from threading import RLock

_LOCK = RLock()
_METRICS: dict[str, int] = {
    "http_requests_total": 0,
    "http_responses_4xx_total": 0,
    "http_responses_5xx_total": 0,
    "unhandled_exceptions_total": 0,
    "movie_lookups_total": 0,
    "movie_lookups_not_found_total": 0,
    "movie_searches_total": 0,
    "movie_searches_empty_total": 0,
    "override_upserts_total": 0,
    "override_removals_total": 0,
}


def inc(name: str, value: int = 1) -> None:
    with _LOCK:
        _METRICS[name] = _METRICS.get(name, 0) + value


def snapshot() -> dict[str, int]:
    with _LOCK:
        return dict(_METRICS)


def reset() -> None:
    with _LOCK:
        for k in _METRICS:
            _METRICS[k] = 0


def render_prometheus() -> str:
    lines: list[str] = []
    for k, v in sorted(snapshot().items()):
        lines.append(f"# TYPE {k} counter")
        lines.append(f"{k} {v}")
    return "\n".join(lines) + "\n"
