"""
Base classes for content providers
Shared request/response records and the adapter capability interface
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional

from .errors import UnsupportedContentType
from .transport import Transport, TransportResult

AUTO_SOURCE = "auto"

class ContentType(str, Enum):
    """Categories of content a provider can serve"""
    NEWS = "news"
    ANALYSIS = "analysis"
    SENTIMENT = "sentiment"
    EVENTS = "events"

    @classmethod
    def parse(cls, value) -> 'ContentType':
        """Convert a raw value, raising UnsupportedContentType on anything unknown"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedContentType(str(value), [t.value for t in cls]) from None

# Request keys consumed by the manager itself, everything else is passed to providers
_MANAGER_OPTIONS = {'source', 'type', 'timeframe', 'limit', 'fallback', 'cache'}

@dataclass(frozen=True)
class ContentRequest:
    """A single content lookup, created per call"""
    symbol: str
    content_type: ContentType = ContentType.NEWS
    source: str = AUTO_SOURCE
    timeframe: str = "1d"
    limit: int = 20
    cache_enabled: bool = True
    fallback_enabled: bool = True
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_options(cls, symbol: str, options: Optional[Mapping[str, Any]] = None) -> 'ContentRequest':
        """Build a request from caller options, normalizing the symbol"""
        options = dict(options or {})
        return cls(
            symbol=symbol.strip().upper(),
            content_type=ContentType.parse(options.get('type', ContentType.NEWS.value)),
            source=options.get('source') or AUTO_SOURCE,
            timeframe=options.get('timeframe') or "1d",
            limit=int(options.get('limit') or 20),
            cache_enabled=bool(options.get('cache', True)),
            fallback_enabled=bool(options.get('fallback', True)),
            extra={k: v for k, v in options.items() if k not in _MANAGER_OPTIONS}
        )

    @property
    def is_auto(self) -> bool:
        return self.source == AUTO_SOURCE

    def provider_options(self) -> Dict[str, Any]:
        """Options handed to adapter methods"""
        return {'timeframe': self.timeframe, 'limit': self.limit, **self.extra}

@dataclass(frozen=True)
class ContentResponse:
    """Canonical, provider-agnostic result of a content call"""
    successful: bool
    status_code: int
    provider: str
    payload: Dict[str, Any]
    timestamp: int = field(default_factory=lambda: int(time.time()))

    @classmethod
    def ok(cls, provider: str, payload: Dict[str, Any], status_code: int = 200) -> 'ContentResponse':
        return cls(successful=True, status_code=status_code, provider=provider, payload=payload)

    @classmethod
    def error(
        cls,
        provider_name: str,
        message: str,
        status_code: int = 500,
        error: str = "News retrieval failed",
        **context
    ) -> 'ContentResponse':
        payload = {'error': error, 'message': message, **context}
        return cls(successful=False, status_code=status_code, provider=provider_name, payload=payload)

    @classmethod
    def from_transport_failure(cls, provider: str, result: TransportResult, symbol: str) -> 'ContentResponse':
        """Wrap a failed transport result without losing its status"""
        return cls.error(
            provider,
            result.error_message,
            status_code=result.status_code,
            error="Provider request failed",
            symbol=symbol,
            provider=provider
        )

    @classmethod
    def from_cache(cls, payload: Dict[str, Any], source: str) -> 'ContentResponse':
        """Synthesize a response from a cached payload"""
        return cls.ok(payload.get('provider', source), payload)

    @property
    def message(self) -> Optional[str]:
        return self.payload.get('message')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'successful': self.successful,
            'status_code': self.status_code,
            'provider': self.provider,
            'payload': self.payload,
            'timestamp': self.timestamp
        }

@dataclass(frozen=True)
class ProviderDescriptor:
    """Snapshot of what a provider offers and whether it answered its probe"""
    name: str
    supported_types: FrozenSet[ContentType]
    capabilities: Dict[str, Any]
    healthy: bool

class ProviderAdapter(ABC):
    """
    Base class for all content providers
    Every content method returns a ContentResponse; transport failures
    come back as unsuccessful responses rather than exceptions
    """

    name: str = ""
    supported_types: FrozenSet[ContentType] = frozenset()

    def __init__(self, transport: Transport):
        self.transport = transport

    @abstractmethod
    def get_news(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        """Get news articles or posts for symbol"""
        pass

    @abstractmethod
    def get_analysis(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        """Get analyzed content with sentiment and impact"""
        pass

    @abstractmethod
    def get_sentiment(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        """Get sentiment readings for symbol"""
        pass

    @abstractmethod
    def get_events(self, symbol: str, options: Optional[Dict[str, Any]] = None) -> ContentResponse:
        """Get major events and announcements"""
        pass

    @abstractmethod
    def get_capabilities(self) -> Dict[str, Any]:
        """Supported features and limits"""
        pass

    @abstractmethod
    def is_healthy(self) -> bool:
        """Run a cheap live probe against the backend"""
        pass

    def get_configuration(self) -> Dict[str, Any]:
        """Provider specific settings, overridden by concrete adapters"""
        return {'name': self.name}

    def supports(self, content_type) -> bool:
        try:
            return ContentType.parse(content_type) in self.supported_types
        except UnsupportedContentType:
            return False

    def get_content(
        self,
        content_type: ContentType,
        symbol: str,
        options: Optional[Dict[str, Any]] = None
    ) -> ContentResponse:
        """Call the content method matching content_type"""
        handlers = {
            ContentType.NEWS: self.get_news,
            ContentType.ANALYSIS: self.get_analysis,
            ContentType.SENTIMENT: self.get_sentiment,
            ContentType.EVENTS: self.get_events
        }
        return handlers[ContentType.parse(content_type)](symbol, options)

    def describe(self) -> ProviderDescriptor:
        """Build a descriptor, probing health on every call"""
        return ProviderDescriptor(
            name=self.name,
            supported_types=self.supported_types,
            capabilities=self.get_capabilities(),
            healthy=self.is_healthy()
        )

    def _fetch(self, path: str, params: Optional[Dict[str, Any]] = None) -> TransportResult:
        return self.transport.get(path, params)

def timeframe_to_days(timeframe: str, default: int = 30) -> int:
    """Convert a timeframe string ('1h', '7d', '1y') to whole days"""
    return {
        '1h': 1,
        '1d': 1,
        '7d': 7,
        '30d': 30,
        '90d': 90,
        '1y': 365
    }.get(timeframe, default)
