"""
Persistent cache layer.

Same TTL contract as SearchCache, but entries are JSON envelopes written to a
durable KeyValueStore under a fixed key prefix:

    {"data": ..., "timestamp": <epoch ms>, "expiresAt": <epoch ms | null>}

A null expiresAt keeps the entry until it is removed or cleared. Durable
stores are not swept by a timer; call cleanup() at session start instead.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from .cache import now_ms
from .errors import MalformedCacheEntry
from .models import SearchFilters
from .validation import MAX_HISTORY_ITEMS, sanitize_search_history, validate_search_query

logger = logging.getLogger(__name__)

SEARCH_PREFIX = "search_"
# Prefixes nest, so the results cache uses its own sub-prefix to keep
# clear()/cleanup() away from history and preferences.
RESULTS_PREFIX = "search_results_"
HISTORY_PREFIX = "search_history_"
PREFERENCES_PREFIX = "search_prefs_"


class PersistentCache:
    """TTL cache serialized to a durable string-keyed store."""

    def __init__(self, store, prefix: str = SEARCH_PREFIX, clock: Callable[[], int] = now_ms):
        """
        Args:
            store: KeyValueStore backend
            prefix: Key prefix isolating this cache from unrelated data
            clock: Millisecond clock, injectable for tests
        """
        self.store = store
        self.prefix = prefix
        self._clock = clock

    def _k(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _owned_keys(self) -> List[str]:
        return [k for k in self.store.keys(self.prefix) if k.startswith(self.prefix)]

    def set(self, key: str, data: Any, ttl: Optional[int] = None) -> None:
        """
        Store `data` under `key`.

        Args:
            key: Cache key (prefix is added here)
            data: JSON-serializable value
            ttl: Time-to-live in milliseconds, None caches until cleared
        """
        if ttl is not None and ttl <= 0:
            raise ValueError("ttl must be positive")

        now = self._clock()
        envelope = {
            "data": data,
            "timestamp": now,
            "expiresAt": now + ttl if ttl is not None else None,
        }
        try:
            self.store.set(self._k(key), json.dumps(envelope, ensure_ascii=False))
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to serialize persistent cache entry '{key}': {e}")
        except Exception as e:
            logger.warning(f"Failed to save persistent cache entry '{key}': {e}")

    def get(self, key: str) -> Optional[Any]:
        """
        Return the cached value or None when absent, expired or corrupt.

        Corrupt entries are removed from the store.
        """
        full_key = self._k(key)
        try:
            stored = self.store.get(full_key)
        except Exception as e:
            logger.warning(f"Failed to read persistent cache entry '{key}': {e}")
            return None

        if stored is None:
            return None

        try:
            envelope = self._decode(full_key, stored)
        except MalformedCacheEntry as e:
            logger.warning(str(e))
            self._remove_full_key(full_key)
            return None

        expires_at = envelope.get("expiresAt")
        if expires_at is not None and self._clock() > expires_at:
            self._remove_full_key(full_key)
            return None

        return envelope.get("data")

    @staticmethod
    def _decode(full_key: str, stored: str) -> Dict[str, Any]:
        try:
            envelope = json.loads(stored)
        except (TypeError, ValueError) as e:
            raise MalformedCacheEntry(full_key, f"invalid JSON ({e})") from e
        if not isinstance(envelope, dict) or "data" not in envelope:
            raise MalformedCacheEntry(full_key, "missing data envelope")
        expires_at = envelope.get("expiresAt")
        if expires_at is not None and not isinstance(expires_at, (int, float)):
            raise MalformedCacheEntry(full_key, "expiresAt is not a number")
        return envelope

    def _remove_full_key(self, full_key: str) -> None:
        try:
            self.store.remove(full_key)
        except Exception as e:
            logger.warning(f"Failed to remove persistent cache entry '{full_key}': {e}")

    def remove(self, key: str) -> None:
        self._remove_full_key(self._k(key))

    def clear(self) -> None:
        """Remove every entry under this cache's prefix."""
        for full_key in self._owned_keys():
            self._remove_full_key(full_key)

    def cleanup(self) -> int:
        """
        Purge expired and corrupt entries under this prefix.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        removed = 0
        for full_key in self._owned_keys():
            try:
                stored = self.store.get(full_key)
                if stored is None:
                    continue
                envelope = self._decode(full_key, stored)
            except MalformedCacheEntry:
                self._remove_full_key(full_key)
                removed += 1
                continue
            except Exception as e:
                logger.warning(f"Persistent cache cleanup skipped '{full_key}': {e}")
                continue

            expires_at = envelope.get("expiresAt")
            if expires_at is not None and now > expires_at:
                self._remove_full_key(full_key)
                removed += 1

        if removed:
            logger.info(f"Persistent cache cleanup removed {removed} entries ({self.prefix})")
        return removed


class SearchHistory:
    """Recent queries, most recent first, sanitized and capped."""

    KEY = "recent"

    def __init__(self, cache: PersistentCache, max_items: int = MAX_HISTORY_ITEMS):
        self.cache = cache
        self.max_items = max_items

    def list(self) -> List[str]:
        stored = self.cache.get(self.KEY)
        if not isinstance(stored, list):
            return []
        return sanitize_search_history([q for q in stored if isinstance(q, str)])[:self.max_items]

    def add(self, query: str) -> List[str]:
        result = validate_search_query(query)
        if not result.is_valid:
            return self.list()
        history = [result.cleaned_query] + self.list()
        history = sanitize_search_history(history)[:self.max_items]
        self.cache.set(self.KEY, history)
        return history

    def clear(self) -> None:
        self.cache.remove(self.KEY)


class SearchPreferences:
    """Last used filters."""

    KEY = "filters"

    def __init__(self, cache: PersistentCache):
        self.cache = cache

    def load(self) -> SearchFilters:
        stored = self.cache.get(self.KEY)
        if not isinstance(stored, dict):
            return SearchFilters()
        try:
            return SearchFilters.from_dict(stored)
        except ValueError:
            logger.warning("Stored search preferences are invalid, using defaults")
            self.cache.remove(self.KEY)
            return SearchFilters()

    def save(self, filters: SearchFilters) -> None:
        self.cache.set(self.KEY, filters.to_dict())
