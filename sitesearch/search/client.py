"""
================================================================================
SiteSearch - Remote Search Client
================================================================================
Async client for the site's JSON search endpoint, wrapped in the caching stack.

Flow for search():
  1. In-memory TTL cache       -> hit: record as cached search, return
  2. In-flight de-duplication  -> identical concurrent searches share one call
  3. Persistent cache          -> cross-session hit: warm the TTL cache, return
  4. GET {base_url}            -> parse SearchResponse
  5. Store in TTL cache (5 min for >10 results, 10 min otherwise) and in the
     persistent cache, record latency

Transport and parse failures are recorded as errors and raised as
TransportError; search_with_fallback() answers from the local engine instead.
================================================================================
"""

import dataclasses
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .cache import SearchCache, make_cache_key
from .errors import TransportError
from .inflight import RequestDeduplicator
from .local_search import LocalSearchEngine
from .models import SearchFilters, SearchResponse, SearchSuggestion
from .monitor import PerformanceMonitor
from .persistent import PersistentCache

logger = logging.getLogger(__name__)

LARGE_RESULT_THRESHOLD = 10
LARGE_RESULT_TTL = 5 * 60 * 1000
SMALL_RESULT_TTL = 10 * 60 * 1000


def result_ttl(response: SearchResponse) -> int:
    """TTL in milliseconds: broad result sets go stale sooner."""
    if len(response.results) > LARGE_RESULT_THRESHOLD:
        return LARGE_RESULT_TTL
    return SMALL_RESULT_TTL


def _copy(response: SearchResponse) -> SearchResponse:
    return dataclasses.replace(
        response,
        results=list(response.results),
        suggestions=list(response.suggestions),
    )


class SearchClient:
    """Cached, de-duplicated client for the remote search API."""

    user_agent: str = "SiteSearch/1.0"

    def __init__(
        self,
        base_url: str,
        *,
        results_cache: SearchCache,
        deduplicator: RequestDeduplicator,
        monitor: PerformanceMonitor,
        persistent_cache: Optional[PersistentCache] = None,
        fallback: Optional[LocalSearchEngine] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        """
        Args:
            base_url: Search endpoint, e.g. http://host/api/search
            results_cache: In-memory TTL cache for SearchResponse values
            deduplicator: In-flight table shared by identical searches
            monitor: Receives latency, cache-hit and error counts
            persistent_cache: Durable cache for cross-session reuse
            fallback: Local engine used by search_with_fallback()
            http_client: Pre-built client (tests, custom transports)
            timeout: Request timeout in seconds for the owned client
        """
        self.base_url = base_url.rstrip('/')
        self.results_cache = results_cache
        self.deduplicator = deduplicator
        self.monitor = monitor
        self.persistent_cache = persistent_cache
        self.fallback = fallback
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={
                    'User-Agent': self.user_agent,
                    'Accept': 'application/json',
                },
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "SearchClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # =========================================================================
    # SEARCH
    # =========================================================================

    @staticmethod
    def cache_key(query: str, filters: SearchFilters, limit: int, offset: int) -> str:
        return make_cache_key(query, {
            'filters': filters.to_dict(),
            'limit': limit,
            'offset': offset,
        })

    async def search(
        self,
        query: str,
        filters: Optional[SearchFilters] = None,
        limit: int = 20,
        offset: int = 0,
        include_content: bool = False,
    ) -> SearchResponse:
        """
        Search through the cache stack and the remote endpoint.

        Raises:
            TransportError: The remote call failed or returned an unusable body
        """
        filters = filters or SearchFilters()
        start = time.perf_counter()
        key = self.cache_key(query, filters, limit, offset)

        cached = self.results_cache.get(key)
        if cached is not None:
            self.monitor.record_search(self._elapsed_ms(start), from_cache=True)
            logger.debug(f"Cache HIT for query '{query}'")
            return _copy(cached)

        async def fetch() -> SearchResponse:
            restored = self._restore_persisted(key)
            if restored is not None:
                self.results_cache.set(key, restored, result_ttl(restored))
                self.monitor.record_search(self._elapsed_ms(start), from_cache=True)
                logger.debug(f"Persistent cache HIT for query '{query}'")
                return restored

            response = await self._fetch(query, filters, limit, offset, include_content)
            ttl = result_ttl(response)
            self.results_cache.set(key, response, ttl)
            if self.persistent_cache is not None:
                self.persistent_cache.set(key, response.to_dict(), ttl)
            self.monitor.record_search(self._elapsed_ms(start), from_cache=False)
            return response

        return _copy(await self.deduplicator.get(key, fetch))

    async def search_with_fallback(
        self,
        query: str,
        filters: Optional[SearchFilters] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> SearchResponse:
        """
        search(), answering from the local engine when the remote call fails.

        Raises:
            TransportError: The remote call failed and no fallback is configured
        """
        try:
            return await self.search(query, filters, limit=limit, offset=offset)
        except TransportError as e:
            if self.fallback is None:
                raise
            logger.warning(f"Remote search failed ({e.__cause__ or e}), using local engine")
            return self.fallback.search(query, filters, limit=limit, offset=offset)

    def _restore_persisted(self, key: str) -> Optional[SearchResponse]:
        if self.persistent_cache is None:
            return None
        stored = self.persistent_cache.get(key)
        if stored is None:
            return None
        try:
            return SearchResponse.from_dict(stored)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable persisted search response: {e}")
            self.persistent_cache.remove(key)
            return None

    async def _fetch(
        self,
        query: str,
        filters: SearchFilters,
        limit: int,
        offset: int,
        include_content: bool,
    ) -> SearchResponse:
        params = {
            'q': query,
            'type': filters.type.value,
            'timeRange': filters.time_range.value,
            'sortBy': filters.sort_by.value,
            'limit': str(limit),
            'offset': str(offset),
            'includeContent': 'true' if include_content else 'false',
        }
        client = await self._get_client()

        try:
            response = await client.get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            return SearchResponse.from_dict(data)
        except httpx.HTTPStatusError as e:
            self.monitor.record_error()
            logger.error(f"Search API error: {e.response.status_code} {e.response.reason_phrase}")
            raise TransportError(status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            self.monitor.record_error()
            logger.error(f"Search API request failed: {e}")
            raise TransportError() from e
        except (KeyError, TypeError, ValueError) as e:
            self.monitor.record_error()
            logger.error(f"Search API returned an unreadable response: {e}")
            raise TransportError() from e

    # =========================================================================
    # SUGGESTIONS & ANALYTICS
    # =========================================================================

    async def get_suggestions(self, query: str, limit: int = 5) -> List[SearchSuggestion]:
        """Popular-query suggestions; empty on short queries or any failure."""
        if not query or len(query) < 2:
            return []

        try:
            client = await self._get_client()
            response = await client.get(
                f"{self.base_url}/suggestions",
                params={'q': query, 'limit': str(limit)},
            )
            if response.status_code != 200:
                return []
            data = response.json()
            if not isinstance(data, dict):
                logger.error(f"Search suggestions returned {type(data).__name__}, expected an object")
                return []
            items = data.get('suggestions') or []
            if not isinstance(items, list):
                return []
            return [SearchSuggestion.from_dict(s) for s in items if isinstance(s, dict)]
        except (httpx.HTTPError, ValueError, TypeError) as e:
            logger.error(f"Search suggestions request failed: {e}")
            return []

    async def track_search(
        self,
        query: str,
        results: int,
        clicked_result: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Report a search (or a click on one of its results) to the analytics endpoint.

        Returns:
            True if the event was accepted; failures never raise
        """
        payload: Dict[str, Any] = {
            'eventType': 'click' if clicked_result else 'search',
            'query': query,
            'resultCount': results,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }
        if clicked_result:
            payload['clickedResult'] = clicked_result

        try:
            client = await self._get_client()
            response = await client.post(f"{self.base_url}/analytics", json=payload)
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning(f"Search analytics tracking failed: {e}")
            return False

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return (time.perf_counter() - start) * 1000
