"""Curve data caches.

The curve service takes a cache instance instead of reaching for a global
one, so tests and the HTTP service each decide what (if anything) to cache.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

DEFAULT_TTL_SECONDS = 60 * 60
DEFAULT_MAX_ENTRIES = 100

CacheKey = Tuple[str, int]


@dataclass
class CacheStats:
    """Cache counters."""
    hits: int = 0
    misses: int = 0
    sets: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


class CurveCache(ABC):
    """Cache of curve data keyed by (position id, current price)."""

    @abstractmethod
    def get(self, position_id: str, current_price: int) -> Optional[Any]:
        """Return cached curve data, or None on a miss."""

    @abstractmethod
    def set(self, position_id: str, current_price: int, data: Any, ttl: Optional[float] = None) -> None:
        """Store curve data for ttl seconds (the cache default when None)."""

    def is_available(self) -> bool:
        return True


class NullCurveCache(CurveCache):
    """Cache that never stores anything."""

    def get(self, position_id: str, current_price: int) -> Optional[Any]:
        return None

    def set(self, position_id: str, current_price: int, data: Any, ttl: Optional[float] = None) -> None:
        return None

    def is_available(self) -> bool:
        return False


@dataclass
class _Entry:
    data: Any
    expires_at: float


class InMemoryCurveCache(CurveCache):
    """Thread-safe in-process cache with TTL expiry and a size cap."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize in-memory cache.

        Args:
            ttl_seconds: Default TTL in seconds
            max_entries: Maximum number of entries; the oldest is evicted first
            clock: Monotonic time source
        """
        if max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")

        self.default_ttl = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, _Entry]" = OrderedDict()
        self._stats = CacheStats()
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def get(self, position_id: str, current_price: int) -> Optional[Any]:
        key = (position_id, current_price)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats.misses += 1
                self.logger.debug(f"Curve cache miss for position {position_id}")
                return None

            if self._clock() >= entry.expires_at:
                del self._entries[key]
                self._stats.misses += 1
                self.logger.debug(f"Curve cache expired for position {position_id}")
                return None

            self._stats.hits += 1
            return entry.data

    def set(self, position_id: str, current_price: int, data: Any, ttl: Optional[float] = None) -> None:
        key = (position_id, current_price)
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            now = self._clock()
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_entries:
                self._evict(now)

            self._entries[key] = _Entry(data=data, expires_at=now + ttl)
            self._stats.sets += 1

    def _evict(self, now: float) -> None:
        """Drop expired entries, then the oldest ones until there is room."""
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        while len(self._entries) >= self.max_entries:
            key, _ = self._entries.popitem(last=False)
            self.logger.debug(f"Evicted curve cache entry for position {key[0]}")

    def invalidate(self, position_id: str) -> int:
        """Remove every entry of a position.

        Returns:
            Number of entries removed
        """
        with self._lock:
            keys = [key for key in self._entries if key[0] == position_id]
            for key in keys:
                del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        """Remove all entries and reset the counters."""
        with self._lock:
            self._entries.clear()
            self._stats = CacheStats()
        self.logger.info("Cleared curve cache")

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                sets=self._stats.sets,
                size=len(self._entries),
            )
