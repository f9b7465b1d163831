"""
================================================================================
SiteSearch - Search Models
================================================================================
Value types shared by the caches, the local engine and the remote client.

Wire format follows the site's JSON search API (camelCase keys):
  SearchResultItem  -> {"id", "type", "title", "excerpt", "content", "url",
                        "breadcrumb", "publishedAt", "imageUrl", "category"}
  SearchResponse    -> {"results", "total", "suggestions", "query", "took"}
================================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


# =============================================================================
# ENUMS
# =============================================================================

class ContentType(str, Enum):
    """Kind of indexed document."""
    PAGE = "page"
    NEWS = "news"
    SERVICE = "service"
    CASE = "case"
    RESOURCE = "resource"


class TypeFilter(str, Enum):
    """Document type filter; ALL disables type filtering."""
    ALL = "all"
    PAGE = "page"
    NEWS = "news"
    SERVICE = "service"
    CASE = "case"
    RESOURCE = "resource"


class TimeRange(str, Enum):
    """Rolling publication window."""
    ALL = "all"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    CUSTOM = "custom"


class SortBy(str, Enum):
    RELEVANCE = "relevance"
    DATE = "date"
    TITLE = "title"


# =============================================================================
# HELPERS
# =============================================================================

def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string or epoch-millis number into an aware datetime.

    Date-only and naive values are taken as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def epoch_millis(value: Optional[datetime]) -> int:
    """Epoch milliseconds for a datetime, 0 when missing."""
    if value is None:
        return 0
    return int(value.timestamp() * 1000)


# =============================================================================
# DATA MODELS
# =============================================================================

@dataclass(frozen=True)
class SearchResultItem:
    """
    One searchable document.

    `id` is the identity of the document inside an index and in cached
    responses; `content` carries the full text used for scoring.
    """
    id: str
    type: ContentType
    title: str
    excerpt: str
    content: str
    url: str
    breadcrumb: List[str] = field(default_factory=list)
    published_at: Optional[datetime] = None
    image_url: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchResultItem":
        """
        Build an item from its JSON representation.

        Raises:
            KeyError: A required field is missing.
            ValueError: `type` or `publishedAt` is not valid.
        """
        return cls(
            id=str(data["id"]),
            type=ContentType(data["type"]),
            title=data.get("title") or "",
            excerpt=data.get("excerpt") or "",
            content=data.get("content") or "",
            url=data.get("url") or "",
            breadcrumb=list(data.get("breadcrumb") or []),
            published_at=parse_timestamp(data.get("publishedAt")),
            image_url=data.get("imageUrl"),
            category=data.get("category"),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "excerpt": self.excerpt,
            "content": self.content,
            "url": self.url,
            "breadcrumb": list(self.breadcrumb),
        }
        if self.published_at is not None:
            payload["publishedAt"] = self.published_at.isoformat()
        if self.image_url is not None:
            payload["imageUrl"] = self.image_url
        if self.category is not None:
            payload["category"] = self.category
        return payload


@dataclass(frozen=True)
class SearchFilters:
    """Query shaping parameters. Pure value object."""
    type: TypeFilter = TypeFilter.ALL
    time_range: TimeRange = TimeRange.ALL
    sort_by: SortBy = SortBy.RELEVANCE

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SearchFilters":
        """
        Build filters from wire names, falling back to defaults for missing keys.

        Raises:
            ValueError: A value is not a member of its enum.
        """
        data = data or {}
        return cls(
            type=TypeFilter(data.get("type") or TypeFilter.ALL.value),
            time_range=TimeRange(data.get("timeRange") or TimeRange.ALL.value),
            sort_by=SortBy(data.get("sortBy") or SortBy.RELEVANCE.value),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": self.type.value,
            "timeRange": self.time_range.value,
            "sortBy": self.sort_by.value,
        }


@dataclass(frozen=True)
class SearchResponse:
    """
    Result page of a search.

    `results` is the requested window, `suggestions` the top five of the full
    sorted list regardless of the window.
    """
    results: List[SearchResultItem]
    total: int
    suggestions: List[SearchResultItem]
    query: str
    took: float

    @classmethod
    def empty(cls, query: str, took: float = 0) -> "SearchResponse":
        return cls(results=[], total=0, suggestions=[], query=query, took=took)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchResponse":
        results = [SearchResultItem.from_dict(item) for item in data.get("results") or []]
        suggestions = [SearchResultItem.from_dict(item) for item in data.get("suggestions") or []]
        return cls(
            results=results,
            total=int(data.get("total", len(results))),
            suggestions=suggestions,
            query=data.get("query") or "",
            took=float(data.get("took") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [item.to_dict() for item in self.results],
            "total": self.total,
            "suggestions": [item.to_dict() for item in self.suggestions],
            "query": self.query,
            "took": self.took,
        }


@dataclass(frozen=True)
class SearchSuggestion:
    """Popular-query suggestion shown under the search box."""
    text: str
    category: str
    count: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchSuggestion":
        return cls(
            text=str(data.get("text", "")),
            category=str(data.get("category", "")),
            count=int(data.get("count", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "category": self.category, "count": self.count}


@dataclass
class CacheItem(Generic[T]):
    """Cached value with insertion time and expiry, both epoch millis."""
    data: T
    timestamp: int
    expires_at: int

    def is_valid(self, now_ms: int) -> bool:
        return now_ms <= self.expires_at
