"""Shared fixtures for NewsGate tests."""

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest

from newsgate.config.settings import (
    APIConfig,
    CacheConfig,
    Config,
    RoutingConfig,
    SentimentConfig,
    SystemConfig,
)
from newsgate.data.base import ContentResponse, ContentType, ProviderAdapter
from newsgate.data.transport import Transport, TransportResult

Route = Union[TransportResult, Callable[[Dict[str, Any]], TransportResult]]


class FakeTransport(Transport):
    """In-memory transport keyed by path; unknown paths answer 404."""

    def __init__(self, routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = dict(routes or {})
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []

    def request(self, method, path, params=None):
        params = dict(params or {})
        self.calls.append((method, path, params))
        route = self.routes.get(path)
        if route is None:
            return TransportResult(404, {'error': 'Not found', 'message': f"No route for {path}"})
        if callable(route):
            return route(params)
        return route

    def calls_to(self, path: str) -> List[Dict[str, Any]]:
        return [params for _, p, params in self.calls if p == path]


class StubAdapter(ProviderAdapter):
    """Adapter with scripted responses for routing and manager tests."""

    def __init__(
        self,
        name: str,
        supported=tuple(ContentType),
        healthy: bool = True,
        fail: bool = False,
        raises: Optional[Exception] = None
    ):
        super().__init__(FakeTransport())
        self.name = name
        self.supported_types = frozenset(supported)
        self.healthy = healthy
        self.fail = fail
        self.raises = raises
        self.calls: List[Tuple[str, str]] = []

    def _respond(self, content_type: str, symbol: str) -> ContentResponse:
        self.calls.append((content_type, symbol))
        if self.raises is not None:
            raise self.raises
        if self.fail:
            return ContentResponse.error(self.name, f"{self.name} is down", status_code=503)
        return ContentResponse.ok(self.name, {
            'symbol': symbol,
            'provider': self.name,
            'type': content_type
        })

    def get_news(self, symbol, options=None):
        return self._respond('news', symbol)

    def get_analysis(self, symbol, options=None):
        return self._respond('analysis', symbol)

    def get_sentiment(self, symbol, options=None):
        return self._respond('sentiment', symbol)

    def get_events(self, symbol, options=None):
        return self._respond('events', symbol)

    def get_capabilities(self):
        return {'provider': self.name, 'supports': sorted(t.value for t in self.supported_types)}

    def is_healthy(self):
        return self.healthy


@pytest.fixture
def config():
    """Default configuration without touching the environment."""
    return Config(
        api=APIConfig(api_key="test-key"),
        cache=CacheConfig(),
        routing=RoutingConfig(),
        sentiment=SentimentConfig(),
        system=SystemConfig()
    )


@pytest.fixture
def fake_transport():
    return FakeTransport()
