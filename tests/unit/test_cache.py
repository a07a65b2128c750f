"""Unit tests for the response cache."""

import json

import pytest

from newsgate.data.base import ContentType
from newsgate.data.cache import CacheEntry, CacheStore, make_cache_key


class TestCacheKey:
    """Test cache key derivation."""

    def test_key_is_pure(self):
        """Identical requests map to the identical key."""
        first = make_cache_key("AAPL", "auto", "news", "1d")
        second = make_cache_key("AAPL", "auto", "news", "1d")
        assert first == second
        assert first.startswith("news:")

    @pytest.mark.parametrize("changed", [
        ("MSFT", "auto", "news", "1d"),
        ("AAPL", "native", "news", "1d"),
        ("AAPL", "auto", "sentiment", "1d"),
        ("AAPL", "auto", "news", "7d"),
    ])
    def test_key_changes_with_each_component(self, changed):
        """Changing any one component yields a different key."""
        assert make_cache_key(*changed) != make_cache_key("AAPL", "auto", "news", "1d")

    def test_key_accepts_enum_content_type(self):
        """Enum and raw string content types share a key."""
        assert make_cache_key("AAPL", "auto", ContentType.NEWS, "1d") == make_cache_key("AAPL", "auto", "news", "1d")

    def test_key_does_not_collide_on_concatenation(self):
        """Field boundaries are part of the key."""
        assert make_cache_key("AA", "Pauto", "news", "1d") != make_cache_key("AAP", "auto", "news", "1d")


class TestCacheStore:
    """Test cache store functionality."""

    @pytest.fixture
    def store(self):
        """Create an in-memory cache store."""
        return CacheStore(default_ttl=60)

    def test_put_and_get(self, store):
        """Test basic cache operations."""
        store.put("key", {"data": "value"})

        result = store.get("key")
        assert result == {"data": "value"}

    def test_missing_key_returns_none(self, store):
        assert store.get("missing") is None

    def test_put_overwrites(self, store):
        """Later writes replace earlier ones."""
        store.put("key", {"version": 1})
        store.put("key", {"version": 2})
        assert store.get("key") == {"version": 2}

    def test_stored_value_is_a_copy(self, store):
        """Changes to the stored or returned value never reach the cache."""
        data = {"articles": [{"title": "a"}]}
        store.put("key", data)
        data["articles"].append({"title": "b"})

        hit = store.get("key")
        hit["articles"][0]["title"] = "changed"

        assert store.get("key") == {"articles": [{"title": "a"}]}

    def test_zero_ttl_is_not_replaced_by_default(self, store):
        store.put("key", {"n": 1}, ttl_seconds=0)
        store._memory_cache["key"].timestamp -= 1

        assert store._memory_cache["key"].ttl_seconds == 0
        assert store.get("key") is None

    def test_missing_ttl_uses_default(self, store):
        store.put("key", {"n": 1})
        assert store._memory_cache["key"].ttl_seconds == 60

    def test_expired_entry_is_dropped(self, store):
        """Test cache TTL functionality."""
        store.put("ttl_key", {"data": "expires"}, ttl_seconds=5)
        store._memory_cache["ttl_key"].timestamp -= 10

        assert store.get("ttl_key") is None
        assert "ttl_key" not in store._memory_cache

    def test_cleanup_expired(self, store):
        store.put("old", {"n": 1}, ttl_seconds=1)
        store.put("fresh", {"n": 2})
        store._memory_cache["old"].timestamp -= 5

        assert store.cleanup_expired() == 1
        assert store.get("fresh") == {"n": 2}

    def test_clear(self, store):
        """Test clearing all cache."""
        for i in range(3):
            store.put(f"key_{i}", {"index": i})

        store.clear()

        assert store.get_stats()['total_entries'] == 0

    def test_stats(self, store):
        store.put("a", 1)
        store.put("b", 2, ttl_seconds=1)
        store._memory_cache["b"].timestamp -= 5

        stats = store.get_stats()
        assert stats['total_entries'] == 2
        assert stats['expired_entries'] == 1
        assert stats['active_entries'] == 1
        assert stats['cache_dir'] is None


class TestCachePersistence:
    """Test JSON persistence of the cache store."""

    def test_entries_survive_restart(self, tmp_path):
        """A second store on the same directory sees earlier writes."""
        CacheStore(tmp_path, default_ttl=60).put("key", {"data": "persisted"})

        reopened = CacheStore(tmp_path, default_ttl=60)
        assert reopened.get("key") == {"data": "persisted"}

    def test_expired_entries_are_not_loaded(self, tmp_path):
        entry = CacheEntry(key="old", data={"n": 1}, timestamp=0, ttl_seconds=1)
        (tmp_path / "responses.json").write_text(json.dumps({"old": entry.to_dict()}))

        store = CacheStore(tmp_path)
        assert store.get("old") is None

    def test_corrupt_file_is_ignored(self, tmp_path):
        (tmp_path / "responses.json").write_text("{not json")

        store = CacheStore(tmp_path)
        assert store.get_stats()['total_entries'] == 0

    def test_clear_removes_file(self, tmp_path):
        store = CacheStore(tmp_path)
        store.put("key", {"data": 1})
        assert (tmp_path / "responses.json").exists()

        store.clear()
        assert not (tmp_path / "responses.json").exists()
