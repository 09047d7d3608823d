from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Callable

import pytest

from backend import http_client
from backend.models import BasicMovieInfo, FetchOptions, MovieRecord
from backend.sources.base import MetadataSource


@dataclass(slots=True)
class JsonCall:
    url: str
    params: dict[str, object]


class GetJsonMock:
    """
    Sustituto de backend.http_client.get_json con routing programable.

    El router recibe (url, params) y devuelve el payload JSON. Si devuelve
    una instancia de Exception, se lanza.
    """

    def __init__(self, router: Callable[[str, dict[str, object]], object]) -> None:
        self._router = router
        self.calls: list[JsonCall] = []

    def __call__(self, url: str, *, params: Mapping[str, object] | None = None, timeout: float | None = None) -> object:
        p = dict(params or {})
        self.calls.append(JsonCall(url=url, params=p))
        payload = self._router(url, p)
        if isinstance(payload, Exception):
            raise payload
        return payload


@pytest.fixture()
def fake_http(monkeypatch: pytest.MonkeyPatch) -> Callable[[Callable[[str, dict[str, object]], object]], GetJsonMock]:
    def install(router: Callable[[str, dict[str, object]], object]) -> GetJsonMock:
        mock = GetJsonMock(router)
        monkeypatch.setattr(http_client, "get_json", mock)
        return mock

    return install


@pytest.fixture()
def no_network(fake_http: Callable[..., GetJsonMock]) -> GetJsonMock:
    """Falla el test si algo intenta salir a la red."""

    def router(url: str, params: dict[str, object]) -> object:
        raise AssertionError(f"unexpected network call: {url}")

    return fake_http(router)


@dataclass(eq=False)
class FakeSource(MetadataSource):
    """Fuente en memoria para tests del orquestador."""

    source_name: str = "Fake"
    source_priority: int = 10
    id_keys: tuple[str, ...] = ()
    available: bool = True
    records: dict[str, MovieRecord] = field(default_factory=dict)
    results: list[BasicMovieInfo] = field(default_factory=list)
    raise_on_fetch: bool = False
    raise_on_probe: bool = False
    fetch_calls: list[str] = field(default_factory=list)
    probe_calls: int = 0

    def __post_init__(self) -> None:
        MetadataSource.__init__(self, "test-key")

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.source_name

    @property
    def priority(self) -> int:  # type: ignore[override]
        return self.source_priority

    @property
    def external_id_keys(self) -> tuple[str, ...]:  # type: ignore[override]
        return self.id_keys

    def _fetch(self, movie_id: str, options: FetchOptions) -> MovieRecord | None:
        self.fetch_calls.append(movie_id)
        if self.raise_on_fetch:
            raise RuntimeError(f"{self.source_name} down")
        record = self.records.get(movie_id)
        if record is None:
            return None
        return MovieRecord.from_dict({**record.to_dict(), "source": self.source_name})

    def _search(self, query: str) -> list[BasicMovieInfo]:
        return [r for r in self.results if query.lower() in r.title.lower()]

    def _probe(self) -> bool:
        self.probe_calls += 1
        if self.raise_on_probe:
            raise RuntimeError("probe exploded")
        return self.available


def make_source(name: str, priority: int, **kwargs: object) -> FakeSource:
    return FakeSource(source_name=name, source_priority=priority, **kwargs)  # type: ignore[arg-type]


@pytest.fixture()
def source_factory() -> Callable[..., FakeSource]:
    return make_source
