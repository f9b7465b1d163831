"""
================================================================================
SiteSearch - Search Package
================================================================================
Site search with a multi-tier cache stack.

Components:
  - cache.py        - In-memory TTL cache (FIFO eviction, background sweep)
  - persistent.py   - TTL cache over a durable key/value store
  - inflight.py     - Collapses identical in-flight requests
  - monitor.py      - Latency / cache-hit / error counters
  - index.py        - Immutable content index
  - scorer.py       - Fuzzy relevance scoring
  - local_search.py - Filter, score, sort, paginate over the index
  - client.py       - Remote search client composing all of the above
================================================================================
"""

from .cache import SearchCache, make_cache_key
from .client import SearchClient
from .errors import InvalidQueryError, MalformedCacheEntry, SearchError, TransportError
from .index import ContentIndex
from .inflight import RequestDeduplicator
from .local_search import LocalSearchEngine
from .models import (
    CacheItem,
    ContentType,
    SearchFilters,
    SearchResponse,
    SearchResultItem,
    SearchSuggestion,
    SortBy,
    TimeRange,
    TypeFilter,
)
from .monitor import PerformanceMonitor
from .persistent import PersistentCache, SearchHistory, SearchPreferences
from .scorer import fuzzy_score, highlight_keywords

__all__ = [
    'CacheItem', 'ContentIndex', 'ContentType', 'InvalidQueryError', 'LocalSearchEngine',
    'MalformedCacheEntry', 'PerformanceMonitor', 'PersistentCache', 'RequestDeduplicator',
    'SearchCache', 'SearchClient', 'SearchError', 'SearchFilters', 'SearchHistory',
    'SearchPreferences', 'SearchResponse', 'SearchResultItem', 'SearchSuggestion',
    'SortBy', 'TimeRange', 'TransportError', 'TypeFilter', 'fuzzy_score',
    'highlight_keywords', 'make_cache_key',
]
