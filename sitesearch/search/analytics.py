"""
In-memory search analytics.

Events are kept in a bounded deque (oldest dropped first) and summarised on
demand: top queries with click rates, zero-result queries, click-through rate.
"""

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

MAX_EVENTS = 10000
TOP_QUERIES = 10

PERIODS = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}
DEFAULT_PERIOD = "7d"


class EventType(str, Enum):
    SEARCH = "search"
    CLICK = "click"
    VIEW = "view"
    EXIT = "exit"


@dataclass
class AnalyticsEvent:
    event_type: EventType
    query: str
    timestamp: datetime
    result_count: Optional[int] = None
    clicked_result: Optional[Dict[str, Any]] = None
    session_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], timestamp: datetime) -> "AnalyticsEvent":
        """
        Raises:
            ValueError: eventType or query is missing or invalid
        """
        if not data.get("eventType") or not data.get("query"):
            raise ValueError("eventType and query are required")
        result_count = data.get("resultCount")
        return cls(
            event_type=EventType(data["eventType"]),
            query=str(data["query"]),
            timestamp=timestamp,
            result_count=int(result_count) if result_count is not None else None,
            clicked_result=data.get("clickedResult"),
            session_id=data.get("sessionId"),
            metadata=dict(data.get("metadata") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "eventType": self.event_type.value,
            "query": self.query,
            "timestamp": self.timestamp.isoformat(),
            "resultCount": self.result_count,
            "clickedResult": self.clicked_result,
            "sessionId": self.session_id,
            "metadata": self.metadata,
        }


class SearchAnalytics:
    """Bounded event log with summary reports."""

    def __init__(self, max_events: int = MAX_EVENTS,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self._events: Deque[AnalyticsEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()
        self._clock = clock

    def record(self, data: Dict[str, Any], **metadata: Any) -> AnalyticsEvent:
        """
        Record an event from its wire representation.

        Extra keyword arguments are merged into the event metadata.
        """
        event = AnalyticsEvent.from_dict(data, timestamp=self._clock())
        event.metadata.update({k: v for k, v in metadata.items() if v is not None})
        with self._lock:
            self._events.append(event)
        return event

    def events(self, period: str = DEFAULT_PERIOD) -> List[AnalyticsEvent]:
        since = self._clock() - PERIODS.get(period, PERIODS[DEFAULT_PERIOD])
        with self._lock:
            return [e for e in self._events if e.timestamp >= since]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def report(self, period: str = DEFAULT_PERIOD) -> Dict[str, Any]:
        """Summarise events of the last `period` (1h, 24h, 7d, 30d)."""
        events = self.events(period)

        total_searches = 0
        total_clicks = 0
        unique_queries = set()
        no_result_queries: List[str] = []
        query_stats: Dict[str, Dict[str, int]] = {}

        for event in events:
            unique_queries.add(event.query)

            if event.event_type == EventType.SEARCH:
                total_searches += 1
                stats = query_stats.setdefault(event.query, {"count": 0, "clicks": 0, "total_results": 0})
                stats["count"] += 1
                if event.result_count is not None:
                    stats["total_results"] += event.result_count
                if event.result_count == 0:
                    no_result_queries.append(event.query)

            elif event.event_type == EventType.CLICK:
                total_clicks += 1
                stats = query_stats.get(event.query)
                if stats:
                    stats["clicks"] += 1

        top_queries = sorted(
            (
                {
                    "query": query,
                    "count": stats["count"],
                    "clickRate": stats["clicks"] / stats["count"] if stats["count"] else 0,
                }
                for query, stats in query_stats.items()
            ),
            key=lambda q: q["count"],
            reverse=True,
        )[:TOP_QUERIES]

        total_results = sum(stats["total_results"] for stats in query_stats.values())

        return {
            "period": {
                "name": period if period in PERIODS else DEFAULT_PERIOD,
                "totalEvents": len(events),
                "totalSearches": total_searches,
                "totalClicks": total_clicks,
                "uniqueQueries": len(unique_queries),
            },
            "topQueries": top_queries,
            "searchPatterns": {
                "avgResultsPerSearch": total_results / total_searches if total_searches else 0,
                "noResultQueries": no_result_queries,
            },
            "userBehavior": {
                "clickThroughRate": total_clicks / total_searches if total_searches else 0,
            },
            "generatedAt": self._clock().isoformat(),
        }
