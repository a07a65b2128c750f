"""
News manager
Unified access to news, analysis, sentiment and events with routing,
caching and provider fallback
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..config import Config, get_config
from ..utils import get_logger
from .base import ContentRequest, ContentResponse
from .cache import CacheStore, make_cache_key
from .errors import (
    AllProvidersFailed,
    ConfigurationError,
    ProviderHealthCheckFailed
)
from .fallback import FallbackCascade, dispatch
from .registry import ProviderRegistry, build_default_registry
from .router import ContentRouter
from .transport import HttpTransport, Transport

logger = get_logger(__name__)

class NewsManager:
    """
    Central entry point for content lookups
    Routes "auto" requests, caches successful payloads and retries failed
    explicit requests on other providers
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        cache: Optional[CacheStore] = None,
        router: Optional[ContentRouter] = None,
        cascade: Optional[FallbackCascade] = None,
        config: Optional[Config] = None
    ):
        self.config = config or get_config()
        self.registry = registry
        self.cache = cache
        self.router = router or ContentRouter(
            registry,
            default_provider=self.config.routing.default_provider
        )
        self.cascade = cascade or FallbackCascade(
            registry,
            self.router,
            fallback_chain=self.config.routing.fallback_chain
        )
        self._transports: List[Transport] = []

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> 'NewsManager':
        """Build a manager with HTTP transports, the default providers and a cache store"""
        config = config or get_config()

        transport = HttpTransport(
            config.api.base_url,
            api_key=config.api.api_key or None,
            timeout=config.api.timeout_seconds
        )
        analysis_transport = HttpTransport(
            config.api.analysis_base_url,
            timeout=config.api.timeout_seconds,
            headers={'Accept': 'application/json, text/plain, */*'}
        )

        registry = build_default_registry(transport, analysis_transport, config)
        cache = CacheStore(config.cache.cache_dir, default_ttl=config.cache.ttl_seconds)

        manager = cls(registry, cache=cache, config=config)
        manager._transports = [transport, analysis_transport]
        return manager

    def close(self):
        """Close transports created by from_config"""
        for transport in self._transports:
            transport.close()
        self._transports = []

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _read_cache(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            return self.cache.get(key)
        except Exception as e:
            logger.error(f"Cache read failed for {key}: {e}")
            return None

    def _write_cache(self, key: str, response: ContentResponse):
        try:
            self.cache.put(key, response.payload, self.config.cache.ttl_seconds)
        except Exception as e:
            logger.error(f"Cache write failed for {key}: {e}")

    def get(self, symbol: str, options: Optional[Mapping[str, Any]] = None) -> ContentResponse:
        """
        Get content for symbol

        Args:
            symbol: Instrument symbol
            options: source ("auto" or a provider name), type (news, analysis,
                sentiment, events), timeframe, limit, fallback, cache and any
                provider specific options

        Returns:
            ContentResponse, unsuccessful when every attempt failed

        Raises:
            UnsupportedContentType: type is not a known content type
            ProviderNotRegistered: source names an unknown provider
        """
        request = ContentRequest.from_options(symbol, options)
        content_type = request.content_type.value
        log = logger.bind(symbol=request.symbol, type=content_type)

        use_cache = request.cache_enabled and self.cache is not None
        cache_key = make_cache_key(request.symbol, request.source, content_type, request.timeframe)

        if use_cache:
            cached = self._read_cache(cache_key)
            if cached is not None:
                log.debug(f"Serving {request.symbol} {content_type} from cache")
                return ContentResponse.from_cache(cached, request.source)

        source = request.source
        try:
            if request.is_auto:
                source = self.router.select_provider(request.content_type)

            response = dispatch(self.registry, source, request)
            if not response.successful:
                log.error(f"Provider {source} failed: {response.message}")
        except ConfigurationError:
            raise
        except Exception as e:
            log.error(f"Provider {source} raised: {e}")
            response = ContentResponse.error(source, str(e), symbol=request.symbol, source=source, type=content_type)

        if response.successful:
            if use_cache:
                self._write_cache(cache_key, response)
            return response

        if request.fallback_enabled and not request.is_auto:
            try:
                response = self.cascade.try_with_fallback(request, exclude=[source])
            except AllProvidersFailed as e:
                log.error(str(e))
                return ContentResponse.error(
                    source,
                    str(e),
                    symbol=request.symbol,
                    source=source,
                    type=content_type
                )
            return response

        return ContentResponse.error(
            source,
            response.message or f"HTTP {response.status_code}",
            status_code=response.status_code if response.status_code >= 400 else 500,
            symbol=request.symbol,
            source=source,
            type=content_type
        )

    def get_from_multiple_sources(
        self,
        symbol: str,
        sources: Iterable[str],
        options: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Query several providers for the same content, without fallback

        A source that fails or raises is reported in errors and never
        stops the others
        """
        sources = list(sources)
        options = dict(options or {})
        results: Dict[str, Any] = {}
        errors: Dict[str, str] = {}

        def fetch(source: str) -> ContentResponse:
            return self.get(symbol, {**options, 'source': source, 'fallback': False})

        if sources:
            workers = min(len(sources), self.config.routing.max_workers)
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {source: executor.submit(fetch, source) for source in sources}

            for source, future in futures.items():
                try:
                    response = future.result()
                except Exception as e:
                    logger.error(f"Source {source} failed for {symbol}: {e}")
                    errors[source] = str(e)
                    continue

                if response.successful:
                    results[source] = response.payload
                else:
                    errors[source] = response.message or 'Unknown error'

        return {
            'symbol': symbol,
            'sources': sources,
            'results': results,
            'errors': errors,
            'success_count': len(results),
            'total_sources': len(sources),
            'timestamp': int(time.time())
        }

    def get_providers_health(self) -> Dict[str, Dict[str, Any]]:
        """Health and capabilities of every registered name, aliases included"""
        health = {}

        for name in self.registry.names():
            try:
                descriptor = self.registry.resolve(name).describe()
                health[name] = {
                    'status': 'healthy' if descriptor.healthy else 'unhealthy',
                    'capabilities': descriptor.capabilities,
                    'name': descriptor.name
                }
            except Exception as e:
                failure = ProviderHealthCheckFailed(name, e)
                logger.error(str(failure))
                health[name] = {
                    'status': 'error',
                    'error': str(e),
                    'name': name
                }

        return health
