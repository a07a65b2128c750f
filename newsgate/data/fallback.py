"""
Fallback cascade
Retries a failed request on other providers, each at most once
"""

from typing import Iterable, List, Optional, Sequence

from ..utils import get_logger
from .base import ContentRequest, ContentResponse
from .errors import AllProvidersFailed, ProviderNotRegistered, ProviderUnsupportedType
from .registry import ProviderRegistry
from .router import ContentRouter

logger = get_logger(__name__)

DEFAULT_FALLBACK_CHAIN = ("native", "analysis")

def dispatch(registry: ProviderRegistry, name: str, request: ContentRequest) -> ContentResponse:
    """
    Send request to the provider registered as name

    Raises:
        ProviderNotRegistered: name is unknown
        ProviderUnsupportedType: the provider cannot serve the content type
    """
    adapter = registry.resolve(name)
    if not adapter.supports(request.content_type):
        raise ProviderUnsupportedType(name, request.content_type.value)
    return adapter.get_content(request.content_type, request.symbol, request.provider_options())

class FallbackCascade:
    """
    Walks the router's choice followed by the fallback chain
    The first successful response wins
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        router: ContentRouter,
        fallback_chain: Sequence[str] = DEFAULT_FALLBACK_CHAIN
    ):
        self.registry = registry
        self.router = router
        self.fallback_chain = tuple(fallback_chain)

    def _canonical(self, name: str) -> Optional[str]:
        try:
            return self.registry.canonical_name(name)
        except ProviderNotRegistered:
            logger.warning(f"Fallback provider {name} not registered, skipping")
            return None

    def try_with_fallback(self, request: ContentRequest, exclude: Iterable[str] = ()) -> ContentResponse:
        """
        Retry request on providers not yet tried

        Args:
            request: The request being retried
            exclude: Providers already attempted by the caller

        Raises:
            AllProvidersFailed: every candidate failed or was excluded
        """
        tried: List[str] = []
        for name in exclude:
            canonical = self._canonical(name) or name
            if canonical not in tried:
                tried.append(canonical)

        candidates = [self.router.select_provider(request.content_type), *self.fallback_chain]
        last_error = None

        for name in candidates:
            canonical = self._canonical(name)
            if canonical is None or canonical in tried:
                continue
            tried.append(canonical)

            logger.warning(f"Falling back to {canonical} for {request.symbol} {request.content_type.value}")
            try:
                response = dispatch(self.registry, canonical, request)
            except ProviderUnsupportedType as e:
                last_error = str(e)
                continue
            except Exception as e:
                logger.error(f"Fallback provider {canonical} failed: {e}")
                last_error = str(e)
                continue

            if response.successful:
                logger.info(f"Fallback to {canonical} succeeded for {request.symbol}")
                return response

            last_error = response.message or f"HTTP {response.status_code}"
            logger.error(f"Fallback provider {canonical} failed: {last_error}")

        raise AllProvidersFailed(request.content_type.value, tried, last_error)
