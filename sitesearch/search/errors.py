"""
Search error taxonomy.

Only TransportError and InvalidQueryError ever reach callers.
MalformedCacheEntry stays inside the persistent cache, which turns it into a
cache miss.
"""

from typing import List, Optional


class SearchError(Exception):
    """Base class for search-layer errors."""


class TransportError(SearchError):
    """Raised when the remote search call fails or returns an unusable response."""

    USER_MESSAGE = "Search service temporarily unavailable, please try again later"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message or self.USER_MESSAGE)


class MalformedCacheEntry(SearchError):
    """A persisted cache entry could not be deserialized."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Malformed cache entry '{key}': {reason}")


class InvalidQueryError(SearchError):
    """A query was rejected by validation."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(self.errors[0] if self.errors else "Invalid search query")
