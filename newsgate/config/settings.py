"""
Configuration management for NewsGate
Loads environment variables and provides centralized settings
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple
from dotenv import load_dotenv
import logging

# Load environment variables
env_path = Path.cwd() / '.env'
load_dotenv(dotenv_path=env_path)

@dataclass
class APIConfig:
    """Backend endpoints and credentials"""
    api_key: str = ""
    base_url: str = "https://api.wioex.com"
    analysis_base_url: str = "https://www.perplexity.ai"
    timeout_seconds: float = 30.0

@dataclass
class CacheConfig:
    """Response cache settings"""
    ttl_seconds: int = 300  # 5 minutes for news content
    cache_dir: Optional[Path] = None  # None keeps the cache in memory only

@dataclass
class RoutingConfig:
    """Provider selection and fallback settings"""
    default_provider: str = "native"
    fallback_chain: Tuple[str, ...] = ("native", "analysis")
    max_workers: int = 4

@dataclass
class SentimentConfig:
    """Social sentiment backend settings"""
    feed_path: str = "/api/news/trump-effect"

    # Standard label -> backend bucket label
    buckets: Dict[str, str] = field(default_factory=lambda: {
        'positive': 'trumpy',
        'neutral': 'neutral',
        'negative': 'grumpy',
    })
    influencer_keywords: Tuple[str, ...] = ("trump",)
    key_posts_limit: int = 3

@dataclass
class SystemConfig:
    """System-level configuration"""
    log_level: str = "INFO"
    log_file: Optional[Path] = None

@dataclass
class Config:
    """Main configuration container"""
    api: APIConfig
    cache: CacheConfig
    routing: RoutingConfig
    sentiment: SentimentConfig
    system: SystemConfig

    # Runtime overrides
    _overrides: Dict[str, any] = field(default_factory=dict)

    def override(self, key: str, value: any):
        """Override a configuration value at runtime"""
        self._overrides[key] = value

    def get(self, key: str, default=None):
        """Get configuration value with override support"""
        if key in self._overrides:
            return self._overrides[key]

        # Navigate nested attributes
        parts = key.split('.')
        obj = self
        for part in parts:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default
        return obj

def _parse_list(raw: str) -> Tuple[str, ...]:
    """Parse a comma separated env value"""
    return tuple(item.strip() for item in raw.split(',') if item.strip())

def _parse_buckets(raw: str) -> Dict[str, str]:
    """Parse 'positive:trumpy,neutral:neutral,negative:grumpy'"""
    buckets = {}
    for pair in _parse_list(raw):
        label, _, bucket = pair.partition(':')
        if not bucket:
            raise ValueError(f"Invalid SENTIMENT_BUCKETS entry: '{pair}'")
        buckets[label.strip().lower()] = bucket.strip()

    missing = {'positive', 'neutral', 'negative'} - set(buckets)
    if missing:
        raise ValueError(f"SENTIMENT_BUCKETS is missing labels: {sorted(missing)}")
    return buckets

# Singleton instance
_config_instance: Optional[Config] = None

def get_config() -> Config:
    """Get or create the configuration singleton"""
    global _config_instance

    if _config_instance is None:
        # Load from environment
        api_config = APIConfig(
            api_key=os.getenv("NEWSGATE_API_KEY", ""),
            base_url=os.getenv("NEWSGATE_BASE_URL", "https://api.wioex.com"),
            analysis_base_url=os.getenv("NEWSGATE_ANALYSIS_BASE_URL", "https://www.perplexity.ai"),
            timeout_seconds=float(os.getenv("NEWSGATE_TIMEOUT", "30"))
        )

        cache_dir = os.getenv("CACHE_DIR")
        cache_config = CacheConfig(
            ttl_seconds=int(os.getenv("CACHE_TTL_SECONDS", "300")),
            cache_dir=Path(cache_dir) if cache_dir else None
        )

        routing_config = RoutingConfig(
            default_provider=os.getenv("ROUTING_DEFAULT_PROVIDER", "native"),
            fallback_chain=_parse_list(os.getenv("ROUTING_FALLBACK_CHAIN", "native,analysis")),
            max_workers=int(os.getenv("ROUTING_MAX_WORKERS", "4"))
        )

        sentiment_config = SentimentConfig(
            feed_path=os.getenv("SENTIMENT_FEED_PATH", "/api/news/trump-effect"),
            buckets=_parse_buckets(
                os.getenv("SENTIMENT_BUCKETS", "positive:trumpy,neutral:neutral,negative:grumpy")
            ),
            influencer_keywords=_parse_list(os.getenv("SENTIMENT_INFLUENCERS", "trump"))
        )

        log_file = os.getenv("LOG_FILE")
        system_config = SystemConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=Path(log_file) if log_file else None
        )

        _config_instance = Config(
            api=api_config,
            cache=cache_config,
            routing=routing_config,
            sentiment=sentiment_config,
            system=system_config
        )

        # Validate critical settings
        if not api_config.api_key:
            logging.warning("NEWSGATE_API_KEY not set - native provider requests will be unauthenticated")

    return _config_instance

def reset_config():
    """Reset the configuration singleton (mainly for testing)"""
    global _config_instance
    _config_instance = None
