"""
Provider registry
Maps provider names and aliases to lazily constructed adapters
"""

import threading
from typing import Callable, Dict, List, Optional, Set, Union

from ..config import Config, get_config
from ..utils import get_logger
from .base import ProviderAdapter
from .errors import ConfigurationError, ProviderNotRegistered
from .providers import AnalysisAdapter, NativeAdapter, SentimentAdapter, SentimentTaxonomy
from .transport import Transport

logger = get_logger(__name__)

ProviderFactory = Callable[[], ProviderAdapter]

# Legacy provider names kept for existing callers
DEFAULT_ALIASES = {
    'wioex': 'native',
    'perplexity': 'analysis',
    'external': 'analysis',
    'social': 'sentiment'
}

class ProviderRegistry:
    """
    Name -> adapter lookup
    Adapters are built on first resolve and reused afterwards; an alias
    always resolves to the instance of its canonical name
    """

    def __init__(self):
        self._factories: Dict[str, ProviderFactory] = {}
        self._aliases: Dict[str, str] = {}
        self._instances: Dict[str, ProviderAdapter] = {}
        self._order: List[str] = []
        self._lock = threading.Lock()

    def register(self, name: str, factory: Union[ProviderFactory, ProviderAdapter]):
        """Register a provider factory, or an already built adapter, under name"""
        with self._lock:
            if name in self._factories or name in self._aliases:
                raise ConfigurationError(f"Provider '{name}' already registered")

            if isinstance(factory, ProviderAdapter):
                self._instances[name] = factory
                adapter = factory
                factory = lambda: adapter
            self._factories[name] = factory
            self._order.append(name)

        logger.debug(f"Registered provider {name}")

    def register_alias(self, alias: str, canonical: str):
        with self._lock:
            if canonical not in self._factories:
                raise ProviderNotRegistered(canonical)
            if alias in self._factories or alias in self._aliases:
                raise ConfigurationError(f"Provider '{alias}' already registered")
            self._aliases[alias] = canonical
            self._order.append(alias)

        logger.debug(f"Registered alias {alias} -> {canonical}")

    def canonical_name(self, name: str) -> str:
        """Name of the provider an alias points to, or name itself"""
        canonical = self._aliases.get(name, name)
        if canonical not in self._factories:
            raise ProviderNotRegistered(name)
        return canonical

    def is_registered(self, name: str) -> bool:
        return name in self._factories or name in self._aliases

    def resolve(self, name: str) -> ProviderAdapter:
        """Get the adapter for name, constructing it on first use"""
        with self._lock:
            canonical = self._aliases.get(name, name)
            if canonical not in self._factories:
                raise ProviderNotRegistered(name)

            adapter = self._instances.get(canonical)
            if adapter is None:
                adapter = self._factories[canonical]()
                self._instances[canonical] = adapter
                logger.debug(f"Created provider {canonical}")

        return adapter

    def list_names(self) -> Set[str]:
        """Every registered name, aliases included"""
        return set(self._order)

    def names(self) -> List[str]:
        """Every registered name in registration order"""
        return list(self._order)

    def __contains__(self, name: str) -> bool:
        return self.is_registered(name)

def build_default_registry(
    transport: Transport,
    analysis_transport: Optional[Transport] = None,
    config: Optional[Config] = None
) -> ProviderRegistry:
    """
    Registry with the native, analysis and sentiment providers

    Args:
        transport: Transport for the first party API (native and sentiment)
        analysis_transport: Transport for the analysis backend, defaults to transport
        config: Configuration, defaults to the global config
    """
    config = config or get_config()
    sentiment = config.sentiment
    analysis_transport = analysis_transport or transport

    registry = ProviderRegistry()
    registry.register('native', lambda: NativeAdapter(transport, feed_path=sentiment.feed_path))
    registry.register('analysis', lambda: AnalysisAdapter(analysis_transport))
    registry.register('sentiment', lambda: SentimentAdapter(
        transport,
        taxonomy=SentimentTaxonomy(sentiment.buckets),
        feed_path=sentiment.feed_path,
        influencer_keywords=sentiment.influencer_keywords,
        key_posts_limit=sentiment.key_posts_limit
    ))

    for alias, canonical in DEFAULT_ALIASES.items():
        registry.register_alias(alias, canonical)

    return registry
