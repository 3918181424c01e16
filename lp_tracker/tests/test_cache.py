"""
Curve cache tests
"""

import pytest

from ..curve.cache import CacheStats, InMemoryCurveCache, NullCurveCache
from .fixtures import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return InMemoryCurveCache(ttl_seconds=60, max_entries=3, clock=clock)


class TestInMemoryCurveCache:
    """InMemoryCurveCache tests"""

    def test_set_and_get(self, cache):
        cache.set("1", 2000, "curve")
        assert cache.get("1", 2000) == "curve"
        assert cache.is_available() is True

    def test_key_includes_price(self, cache):
        cache.set("1", 2000, "curve")
        assert cache.get("1", 2001) is None
        assert cache.get("2", 2000) is None

    def test_entry_expires(self, cache, clock):
        cache.set("1", 2000, "curve")
        clock.advance(59)
        assert cache.get("1", 2000) == "curve"
        clock.advance(1)
        assert cache.get("1", 2000) is None
        assert cache.stats().size == 0

    def test_custom_ttl(self, cache, clock):
        cache.set("1", 2000, "curve", ttl=5)
        clock.advance(5)
        assert cache.get("1", 2000) is None

    def test_evicts_oldest_when_full(self, cache):
        for position_id in ("1", "2", "3"):
            cache.set(position_id, 100, position_id)
        cache.set("4", 100, "4")

        assert cache.get("1", 100) is None
        assert cache.get("4", 100) == "4"
        assert cache.stats().size == 3

    def test_evicts_expired_before_oldest(self, cache, clock):
        cache.set("1", 100, "1")
        cache.set("2", 100, "2", ttl=1)
        cache.set("3", 100, "3")
        clock.advance(2)
        cache.set("4", 100, "4")

        assert cache.get("1", 100) == "1"
        assert cache.get("2", 100) is None
        assert cache.get("4", 100) == "4"

    def test_overwrite_does_not_evict(self, cache):
        for position_id in ("1", "2", "3"):
            cache.set(position_id, 100, position_id)
        cache.set("1", 100, "updated")

        assert cache.get("1", 100) == "updated"
        assert cache.get("2", 100) == "2"
        assert cache.stats().size == 3

    def test_invalidate_position(self, cache):
        cache.set("1", 100, "a")
        cache.set("1", 200, "b")
        cache.set("2", 100, "c")

        assert cache.invalidate("1") == 2
        assert cache.get("1", 100) is None
        assert cache.get("2", 100) == "c"
        assert cache.invalidate("missing") == 0

    def test_stats(self, cache):
        cache.set("1", 100, "a")
        cache.get("1", 100)
        cache.get("1", 200)

        stats = cache.stats()
        assert stats == CacheStats(hits=1, misses=1, sets=1, size=1)
        assert stats.hit_rate == 0.5

    def test_clear_resets_stats(self, cache):
        cache.set("1", 100, "a")
        cache.get("1", 100)
        cache.clear()

        assert cache.get("1", 100) is None
        assert cache.stats() == CacheStats(hits=0, misses=1, sets=0, size=0)

    def test_invalid_max_entries(self):
        with pytest.raises(ValueError):
            InMemoryCurveCache(max_entries=0)


class TestNullCurveCache:
    """NullCurveCache tests"""

    def test_never_stores(self):
        cache = NullCurveCache()
        cache.set("1", 100, "a")
        assert cache.get("1", 100) is None
        assert cache.is_available() is False

    def test_empty_hit_rate(self):
        assert CacheStats().hit_rate == 0.0
