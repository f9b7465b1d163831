"""
================================================================================
SiteSearch - Application Services
================================================================================
Builds the object graph shared by the blueprints: caches, content index,
local engine, suggestions, analytics and the performance monitor.

create_app() stores the bundle in app.extensions["sitesearch"]; routes reach
it through get_services().
================================================================================
"""

from dataclasses import dataclass
from typing import Optional

from flask import current_app

from .cache import KeyValueStore, create_store
from .config import Config
from .log import log
from .search.analytics import SearchAnalytics
from .search.cache import SearchCache
from .search.client import SearchClient
from .search.index import ContentIndex
from .search.inflight import RequestDeduplicator
from .search.local_search import LocalSearchEngine
from .search.monitor import PerformanceMonitor
from .search.persistent import (
    HISTORY_PREFIX,
    PREFERENCES_PREFIX,
    RESULTS_PREFIX,
    PersistentCache,
    SearchHistory,
    SearchPreferences,
)
from .search.suggestions import SuggestionProvider

EXTENSION_KEY = "sitesearch"


@dataclass
class SearchServices:
    config: Config
    store: KeyValueStore
    index: ContentIndex
    engine: LocalSearchEngine
    results_cache: SearchCache
    suggestion_cache: SearchCache
    persistent_results: PersistentCache
    history: SearchHistory
    preferences: SearchPreferences
    suggestions: SuggestionProvider
    analytics: SearchAnalytics
    monitor: PerformanceMonitor
    deduplicator: RequestDeduplicator

    def make_client(self, base_url: Optional[str] = None, **kwargs) -> SearchClient:
        """Remote client sharing this app's caches, monitor and local fallback."""
        return SearchClient(
            base_url or self.config.search_api_url,
            results_cache=self.results_cache,
            deduplicator=self.deduplicator,
            monitor=self.monitor,
            persistent_cache=self.persistent_results,
            fallback=self.engine,
            timeout=kwargs.pop('timeout', self.config.search_api_timeout),
            **kwargs,
        )

    def close(self) -> None:
        """Stop background cache sweeps."""
        self.results_cache.close()
        self.suggestion_cache.close()


def load_index(config: Config) -> ContentIndex:
    if config.content_index_path:
        index = ContentIndex.from_json_file(config.content_index_path)
        log(f"📚 Loaded {len(index)} documents from {config.content_index_path}")
        return index
    return ContentIndex.default()


def build_services(config: Config) -> SearchServices:
    """Wire every search component from configuration."""
    store = create_store(
        config.persistent_store,
        redis_url=config.redis_url,
        database_url=config.database_url,
    )

    persistent_results = PersistentCache(store, prefix=RESULTS_PREFIX)
    removed = persistent_results.cleanup()
    if removed:
        log(f"🧹 Removed {removed} expired persisted search results")

    index = load_index(config)
    suggestion_cache = SearchCache(
        max_size=config.suggestion_cache_max_size,
        default_ttl=config.suggestion_cache_ttl * 1000,
        sweep_interval=config.sweep_interval,
    )

    return SearchServices(
        config=config,
        store=store,
        index=index,
        engine=LocalSearchEngine(index),
        results_cache=SearchCache(
            max_size=config.search_cache_max_size,
            default_ttl=config.search_cache_ttl * 1000,
            sweep_interval=config.sweep_interval,
        ),
        suggestion_cache=suggestion_cache,
        persistent_results=persistent_results,
        history=SearchHistory(PersistentCache(store, prefix=HISTORY_PREFIX)),
        preferences=SearchPreferences(PersistentCache(store, prefix=PREFERENCES_PREFIX)),
        suggestions=SuggestionProvider(cache=suggestion_cache),
        analytics=SearchAnalytics(),
        monitor=PerformanceMonitor(),
        deduplicator=RequestDeduplicator(),
    )


def get_services() -> SearchServices:
    return current_app.extensions[EXTENSION_KEY]
