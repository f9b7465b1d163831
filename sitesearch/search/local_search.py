"""
Local search engine.

Linear scan over a ContentIndex: filter by type and publication window, score
each document with fuzzy_score(), keep documents scoring above the threshold,
sort, paginate. Pure CPU work, no I/O; used for offline mode, as the fallback
behind the remote client, and behind the site's own /api/search endpoint.
"""

import locale
import logging
import time
from datetime import timedelta
from typing import Callable, List, Optional, Tuple

from .index import ContentIndex
from .models import (
    SearchFilters,
    SearchResponse,
    SearchResultItem,
    SortBy,
    TimeRange,
    TypeFilter,
    epoch_millis,
)
from .scorer import fuzzy_score

logger = logging.getLogger(__name__)

TITLE_WEIGHT = 2.0
CONTENT_WEIGHT = 1.0
EXCERPT_WEIGHT = 1.5
MIN_SCORE = 0.1
SUGGESTION_COUNT = 5

TIME_RANGES = {
    TimeRange.WEEK: timedelta(days=7),
    TimeRange.MONTH: timedelta(days=30),
    TimeRange.QUARTER: timedelta(days=90),
    TimeRange.YEAR: timedelta(days=365),
}


def score_document(query: str, item: SearchResultItem) -> float:
    """Weighted title/content/excerpt score of one document."""
    title_score = fuzzy_score(query, item.title)
    content_score = fuzzy_score(query, item.content)
    excerpt_score = fuzzy_score(query, item.excerpt)
    return title_score * TITLE_WEIGHT + content_score * CONTENT_WEIGHT + excerpt_score * EXCERPT_WEIGHT


class LocalSearchEngine:
    """Filters, scores, sorts and paginates documents of a ContentIndex."""

    def __init__(self, index: ContentIndex, clock: Callable[[], float] = time.time):
        """
        Args:
            index: Documents to search
            clock: Wall clock in epoch seconds, used for publication windows
        """
        self.index = index
        self._clock = clock

    def replace_index(self, index: ContentIndex) -> None:
        """Swap in a rebuilt index."""
        self.index = index

    def search(
        self,
        query: str,
        filters: Optional[SearchFilters] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> SearchResponse:
        """
        Search the index.

        Args:
            query: Raw query, a blank query returns an empty response
            filters: Type / time range / sort order (default: all, all, relevance)
            limit: Page size
            offset: Index of the first result in the page

        Returns:
            SearchResponse with the page, the total match count and the top
            five matches as suggestions
        """
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must not be negative")

        start = time.perf_counter()
        filters = filters or SearchFilters()

        if not query.strip():
            return SearchResponse.empty(query, took=self._elapsed_ms(start))

        index = self.index
        now_ms = int(self._clock() * 1000)
        scored: List[Tuple[SearchResultItem, float]] = []

        for item in index:
            if not self._matches_type(item, filters):
                continue
            if not self._within_time_range(item, filters, now_ms):
                continue
            score = score_document(query, item)
            if score > MIN_SCORE:
                scored.append((item, score))

        self._sort(scored, filters.sort_by)

        results = [item for item, _ in scored]
        total = len(results)
        took = self._elapsed_ms(start)
        logger.debug(f"Local search '{query}' matched {total}/{len(index)} documents in {took:.2f}ms")

        return SearchResponse(
            results=results[offset:offset + limit],
            total=total,
            suggestions=results[:SUGGESTION_COUNT],
            query=query,
            took=took,
        )

    @staticmethod
    def _matches_type(item: SearchResultItem, filters: SearchFilters) -> bool:
        if filters.type == TypeFilter.ALL:
            return True
        return item.type.value == filters.type.value

    @staticmethod
    def _within_time_range(item: SearchResultItem, filters: SearchFilters, now_ms: int) -> bool:
        # Undated documents and ranges without a fixed window (all, custom) pass
        window = TIME_RANGES.get(filters.time_range)
        if window is None or item.published_at is None:
            return True
        age_ms = now_ms - epoch_millis(item.published_at)
        return age_ms <= window.total_seconds() * 1000

    @staticmethod
    def _sort(scored: List[Tuple[SearchResultItem, float]], sort_by: SortBy) -> None:
        # list.sort is stable, also with reverse=True
        if sort_by == SortBy.RELEVANCE:
            scored.sort(key=lambda pair: pair[1], reverse=True)
        elif sort_by == SortBy.DATE:
            scored.sort(key=lambda pair: epoch_millis(pair[0].published_at), reverse=True)
        elif sort_by == SortBy.TITLE:
            # case-insensitive collation, exact title breaks ties
            scored.sort(key=lambda pair: (locale.strxfrm(pair[0].title.casefold()), pair[0].title))

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return round((time.perf_counter() - start) * 1000, 3)
