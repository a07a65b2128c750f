"""
Content router
Picks the best provider for a content type from a priority table
"""

from typing import Callable, Dict, Mapping, Optional, Sequence

from ..utils import get_logger
from .base import ContentType, ProviderAdapter
from .errors import ProviderNotRegistered
from .registry import ProviderRegistry

logger = get_logger(__name__)

HealthPredicate = Callable[[ProviderAdapter], bool]

DEFAULT_PRIORITIES: Dict[ContentType, tuple] = {
    ContentType.NEWS: ('native', 'analysis', 'sentiment'),
    ContentType.ANALYSIS: ('analysis', 'native', 'sentiment'),
    ContentType.SENTIMENT: ('sentiment', 'analysis', 'native'),
    ContentType.EVENTS: ('native', 'analysis', 'sentiment')
}

def _probe(adapter: ProviderAdapter) -> bool:
    return adapter.is_healthy()

class ContentRouter:
    """
    Provider selection for "auto" requests
    Candidates are tried in priority order; the first that supports the
    type and passes the health check wins
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        priorities: Optional[Mapping[ContentType, Sequence[str]]] = None,
        default_provider: str = "native"
    ):
        self.registry = registry
        self.priorities = dict(priorities or DEFAULT_PRIORITIES)
        self.default_provider = default_provider

    def candidates(self, content_type) -> Sequence[str]:
        return self.priorities.get(ContentType.parse(content_type), ())

    def select_provider(self, content_type, health_predicate: Optional[HealthPredicate] = None) -> str:
        """
        Choose a provider name for content_type

        Falls back to the default provider, healthy or not, when no
        candidate qualifies
        """
        content_type = ContentType.parse(content_type)
        is_healthy = health_predicate or _probe

        for name in self.candidates(content_type):
            try:
                adapter = self.registry.resolve(name)
                if not adapter.supports(content_type):
                    continue
                if is_healthy(adapter):
                    logger.debug(f"Routed {content_type.value} request to {name}")
                    return name
                logger.warning(f"{name} health check failed, skipping")
            except ProviderNotRegistered:
                logger.debug(f"Provider {name} not registered, skipping")
            except Exception as e:
                logger.error(f"Error probing {name}: {e}")

        logger.warning(f"No healthy provider for {content_type.value}, using {self.default_provider}")
        return self.default_provider
