"""
Content routing layer
Provider adapters, routing, fallback and caching for financial content
"""

from .base import (
    AUTO_SOURCE,
    ContentType,
    ContentRequest,
    ContentResponse,
    ProviderDescriptor,
    ProviderAdapter
)

from .errors import (
    NewsGateError,
    ConfigurationError,
    ProviderError,
    UnsupportedContentType,
    ProviderNotRegistered,
    ProviderUnsupportedType,
    AllProvidersFailed,
    ProviderHealthCheckFailed
)

from .transport import Transport, TransportResult, HttpTransport
from .cache import CacheStore, make_cache_key
from .registry import ProviderRegistry, build_default_registry
from .router import ContentRouter, DEFAULT_PRIORITIES
from .fallback import FallbackCascade
from .news_manager import NewsManager

__all__ = [
    # Base classes
    'AUTO_SOURCE',
    'ContentType',
    'ContentRequest',
    'ContentResponse',
    'ProviderDescriptor',
    'ProviderAdapter',

    # Errors
    'NewsGateError',
    'ConfigurationError',
    'ProviderError',
    'UnsupportedContentType',
    'ProviderNotRegistered',
    'ProviderUnsupportedType',
    'AllProvidersFailed',
    'ProviderHealthCheckFailed',

    # Main interfaces
    'Transport',
    'TransportResult',
    'HttpTransport',
    'CacheStore',
    'make_cache_key',
    'ProviderRegistry',
    'build_default_registry',
    'ContentRouter',
    'DEFAULT_PRIORITIES',
    'FallbackCascade',
    'NewsManager'
]
