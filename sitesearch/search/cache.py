"""
In-memory TTL cache for search results and suggestions.

Design:
  - Per-entry expiry (milliseconds), checked lazily on get()
  - Capacity bound with FIFO-by-write eviction: when full, the entry with the
    oldest insertion timestamp goes, reads never reorder entries
  - Background sweep on a daemon timer removes expired entries nobody re-reads
  - Thread-safe with a single lock

Usage:
    cache = SearchCache(max_size=200, default_ttl=10 * 60 * 1000)

    cache.set_with_query("carbon", {"type": "all"}, response)
    cached = cache.get_with_query("carbon", {"type": "all"})

    stats = cache.stats()
"""

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Generic, Mapping, Optional, TypeVar

from .models import CacheItem

logger = logging.getLogger(__name__)

T = TypeVar("T")

KEY_SEPARATOR = "::"
FILTER_SEPARATOR = "|"


def now_ms() -> int:
    return int(time.time() * 1000)


def _format_filter_value(value: Any) -> str:
    if isinstance(value, Mapping):
        return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    if hasattr(value, "value"):  # Enum members
        return str(value.value)
    return str(value)


def make_cache_key(query: str, filters: Mapping[str, Any]) -> str:
    """
    Build a cache key from a query and a filter mapping.

    The query is lowercased and trimmed; filters are serialized as sorted
    `key:value` pairs, so field order never changes the key.

    Args:
        query: Search query string
        filters: Filter mapping (nested mappings are serialized with sorted keys)

    Returns:
        Cache key string
    """
    normalized_query = query.lower().strip()
    sorted_filters = FILTER_SEPARATOR.join(
        f"{key}:{_format_filter_value(filters[key])}" for key in sorted(filters)
    )
    return f"{normalized_query}{KEY_SEPARATOR}{sorted_filters}"


class SearchCache(Generic[T]):
    """Thread-safe in-memory TTL cache with FIFO eviction."""

    def __init__(
        self,
        max_size: int = 100,
        default_ttl: int = 5 * 60 * 1000,
        sweep_interval: Optional[float] = 60.0,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Initialize cache.

        Args:
            max_size: Maximum cache entries
            default_ttl: Time-to-live in milliseconds for set() without ttl
            sweep_interval: Seconds between background sweeps, None disables
            clock: Millisecond clock, injectable for tests
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")

        self.max_size = max_size
        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._cache: Dict[str, CacheItem[T]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._timer: Optional[threading.Timer] = None
        self._closed = False

        if sweep_interval:
            self._schedule_sweep()

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def set(self, key: str, value: T, ttl: Optional[int] = None) -> None:
        """
        Cache a value.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time-to-live in milliseconds (default: default_ttl)
        """
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError("ttl must be positive")

        with self._lock:
            now = self._clock()
            if key in self._cache:
                # Re-set counts as a fresh write: move it to the back
                del self._cache[key]
            elif len(self._cache) >= self.max_size:
                self._evict_oldest()

            self._cache[key] = CacheItem(data=value, timestamp=now, expires_at=now + ttl)

    def get(self, key: str) -> Optional[T]:
        """
        Get a cached value if present and not expired.

        Returns:
            Cached value or None if not found/expired
        """
        with self._lock:
            item = self._cache.get(key)
            if item is None:
                self._misses += 1
                return None

            if not item.is_valid(self._clock()):
                del self._cache[key]
                self._misses += 1
                return None

            self._hits += 1
            return item.data

    def delete(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def set_with_query(
        self,
        query: str,
        filters: Mapping[str, Any],
        data: T,
        ttl: Optional[int] = None,
    ) -> None:
        """Cache `data` under the key built from `query` and `filters`."""
        self.set(make_cache_key(query, filters), data, ttl)

    def get_with_query(self, query: str, filters: Mapping[str, Any]) -> Optional[T]:
        return self.get(make_cache_key(query, filters))

    def _evict_oldest(self) -> None:
        # Caller holds the lock. min() keeps the first of equal timestamps,
        # which is the earliest insertion.
        if not self._cache:
            return
        oldest_key = min(self._cache, key=lambda k: self._cache[k].timestamp)
        del self._cache[oldest_key]
        logger.debug(f"Evicted oldest cache entry '{oldest_key}'")

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def cleanup(self) -> int:
        """
        Remove all expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired_keys = [
                key for key, item in self._cache.items()
                if not item.is_valid(now)
            ]
            for key in expired_keys:
                del self._cache[key]
        return len(expired_keys)

    def _schedule_sweep(self) -> None:
        self._timer = threading.Timer(self.sweep_interval, self._sweep)
        self._timer.daemon = True
        self._timer.start()

    def _sweep(self) -> None:
        if self._closed:
            return
        try:
            removed = self.cleanup()
            if removed:
                logger.debug(f"Cache sweep removed {removed} expired entries")
        finally:
            if not self._closed:
                self._schedule_sweep()

    def close(self) -> None:
        """Stop the background sweep."""
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def clear(self) -> None:
        """Clear all cache entries and reset statistics."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with size, max_size, default_ttl, hits, misses and hit_rate
            (fraction 0..1 of get() calls that hit)
        """
        with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = self._hits / total_requests if total_requests > 0 else 0.0
            return {
                "size": len(self._cache),
                "max_size": self.max_size,
                "default_ttl": self.default_ttl,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 4),
            }
