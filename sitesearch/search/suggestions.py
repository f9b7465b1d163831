"""
Popular-query suggestions.

Flow:
  1. Query shorter than 2 chars -> the most popular suggestions
  2. Suggestions whose text or category contains the query
  3. No containment match -> suggestions containing every character of the query
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from .cache import SearchCache
from .content import POPULAR_SUGGESTIONS
from .models import SearchSuggestion
from .validation import sanitize_search_suggestion

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 10
MIN_QUERY_LENGTH = 2


class SuggestionProvider:
    """Matches queries against a fixed list of popular searches."""

    def __init__(
        self,
        suggestions: Optional[Iterable[SearchSuggestion]] = None,
        cache: Optional[SearchCache] = None,
    ):
        if suggestions is None:
            suggestions = [SearchSuggestion.from_dict(s) for s in POPULAR_SUGGESTIONS]
        self.suggestions: List[SearchSuggestion] = []
        for suggestion in suggestions:
            text = sanitize_search_suggestion(suggestion.text)
            if text:
                self.suggestions.append(replace(suggestion, text=text))
        self.cache = cache

    def suggest(self, query: str, limit: int = 5) -> List[SearchSuggestion]:
        """
        Args:
            query: Partial user input
            limit: Maximum suggestions, capped at 10

        Returns:
            Matching suggestions in popularity-list order
        """
        limit = max(0, min(limit, MAX_SUGGESTIONS))
        query = query or ""

        if len(query) < MIN_QUERY_LENGTH:
            return self.suggestions[:limit]

        cache_filters = {"limit": limit}
        if self.cache is not None:
            cached = self.cache.get_with_query(query, cache_filters)
            if cached is not None:
                return list(cached)

        matches = self._match(query)[:limit]

        if self.cache is not None:
            self.cache.set_with_query(query, cache_filters, tuple(matches))
        return matches

    def _match(self, query: str) -> List[SearchSuggestion]:
        normalized = query.lower().strip()
        contained = [
            s for s in self.suggestions
            if normalized in s.text.lower() or normalized in s.category.lower()
        ]
        if contained:
            return contained

        chars = [c.lower() for c in query]
        fuzzy = [s for s in self.suggestions if all(c in s.text.lower() for c in chars)]
        if fuzzy:
            logger.debug(f"Suggestions for '{query}' fell back to character matching")
        return fuzzy
