"""
Cache management for provider responses
Thread-safe TTL store with optional JSON persistence
"""

import copy
import json
import time
import hashlib
import threading
from pathlib import Path
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..utils import get_logger

logger = get_logger(__name__)

CACHE_KEY_PREFIX = "news"

def make_cache_key(symbol: str, source: str, content_type: str, timeframe: str) -> str:
    """
    Derive the cache key for a request

    The key depends only on (symbol, source, content_type, timeframe);
    JSON encoding of the ordered fields keeps distinct tuples distinct.
    """
    content_type = getattr(content_type, 'value', content_type)
    key_data = json.dumps([symbol, source, content_type, timeframe])
    return f"{CACHE_KEY_PREFIX}:{hashlib.md5(key_data.encode()).hexdigest()}"

@dataclass
class CacheEntry:
    """Represents a cached data entry"""
    key: str
    data: Any
    timestamp: float
    ttl_seconds: int

    @property
    def is_expired(self) -> bool:
        """Check if cache entry has expired"""
        return self.age_seconds > self.ttl_seconds

    @property
    def age_seconds(self) -> float:
        """Get age of cache entry in seconds"""
        return time.time() - self.timestamp

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            'key': self.key,
            'data': self.data,
            'timestamp': self.timestamp,
            'ttl_seconds': self.ttl_seconds
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CacheEntry':
        """Create from dictionary"""
        return cls(**data)

class CacheStore:
    """
    Key/value cache with TTL support
    Entries live in memory; when a cache directory is given they are
    also written to a JSON file so they survive restarts
    """

    def __init__(self, cache_dir: Optional[Path] = None, default_ttl: int = 300):
        self.cache_dir = Path(cache_dir) if cache_dir else None
        self.default_ttl = default_ttl
        self._lock = threading.Lock()
        self._memory_cache: Dict[str, CacheEntry] = {}

        if self.cache_dir:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            self._load_disk()
            logger.info(f"Initialized cache store at {self.cache_dir}")

    @property
    def _cache_file(self) -> Optional[Path]:
        return self.cache_dir / "responses.json" if self.cache_dir else None

    def _load_disk(self):
        """Load unexpired entries from the JSON file"""
        cache_file = self._cache_file
        if not cache_file.exists():
            return

        try:
            with open(cache_file, 'r') as f:
                cache_data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read cache file {cache_file}: {e}")
            return

        for key, entry_data in cache_data.items():
            entry = CacheEntry.from_dict(entry_data)
            if not entry.is_expired:
                self._memory_cache[key] = entry

    def _write_disk(self):
        """Persist the current entries, called with the lock held"""
        cache_file = self._cache_file
        cache_data = {k: e.to_dict() for k, e in self._memory_cache.items() if not e.is_expired}
        with open(cache_file, 'w') as f:
            json.dump(cache_data, f, indent=2)

    def get(self, key: str) -> Optional[Any]:
        """
        Retrieve data from cache

        Returns:
            Cached data if found and not expired, None otherwise
        """
        with self._lock:
            entry = self._memory_cache.get(key)
            if entry is None:
                logger.debug(f"Cache miss for {key}")
                return None

            if entry.is_expired:
                # Remove expired entry
                del self._memory_cache[key]
                logger.debug(f"Cache expired for {key}")
                return None

        logger.debug(f"Cache hit for {key} (age: {entry.age_seconds:.1f}s)")
        return copy.deepcopy(entry.data)

    def put(self, key: str, data: Any, ttl_seconds: Optional[int] = None):
        """
        Store a copy of data in cache, overwriting any previous value

        Args:
            key: Cache key
            data: JSON serializable data
            ttl_seconds: Time to live in seconds, None for the store default
        """
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        entry = CacheEntry(key=key, data=copy.deepcopy(data), timestamp=time.time(), ttl_seconds=ttl)

        with self._lock:
            self._memory_cache[key] = entry
            if self.cache_dir:
                self._write_disk()

        logger.debug(f"Cached {key} with TTL {ttl}s")

    def clear(self):
        """Drop every entry"""
        with self._lock:
            self._memory_cache.clear()
            if self.cache_dir and self._cache_file.exists():
                self._cache_file.unlink()
        logger.info("Cleared all cache")

    def cleanup_expired(self) -> int:
        """Remove all expired cache entries"""
        with self._lock:
            expired = [k for k, e in self._memory_cache.items() if e.is_expired]
            for key in expired:
                del self._memory_cache[key]
            if expired and self.cache_dir:
                self._write_disk()

        logger.info(f"Cleaned up {len(expired)} expired cache entries")
        return len(expired)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        with self._lock:
            entries = list(self._memory_cache.values())

        expired = sum(1 for e in entries if e.is_expired)
        return {
            'total_entries': len(entries),
            'expired_entries': expired,
            'active_entries': len(entries) - expired,
            'cache_dir': str(self.cache_dir) if self.cache_dir else None
        }
