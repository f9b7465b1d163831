"""Search performance counters."""

import threading
from dataclasses import dataclass, asdict
from typing import Dict


@dataclass
class SearchMetrics:
    search_count: int = 0
    total_time_ms: float = 0.0
    cache_hits: int = 0
    errors: int = 0


class PerformanceMonitor:
    """
    Cumulative latency, cache-hit and error counters for searches.

    Rates are plain ratios over the counters since construction or the last
    reset(); there is no windowing.
    """

    def __init__(self):
        self._metrics = SearchMetrics()
        self._lock = threading.Lock()

    def record_search(self, duration_ms: float, from_cache: bool = False) -> None:
        with self._lock:
            self._metrics.search_count += 1
            self._metrics.total_time_ms += duration_ms
            if from_cache:
                self._metrics.cache_hits += 1

    def record_error(self) -> None:
        with self._lock:
            self._metrics.errors += 1

    def get_stats(self) -> Dict[str, float]:
        """
        Returns:
            Dict with totalSearches, avgResponseTime (ms), cacheHitRate and
            errorRate; ratios are 0 before the first search
        """
        with self._lock:
            m = self._metrics
            count = m.search_count
            return {
                "totalSearches": count,
                "avgResponseTime": m.total_time_ms / count if count > 0 else 0,
                "cacheHitRate": m.cache_hits / count if count > 0 else 0,
                "errorRate": m.errors / count if count > 0 else 0,
            }

    def snapshot(self) -> Dict[str, float]:
        """Raw counters."""
        with self._lock:
            return asdict(self._metrics)

    def reset(self) -> None:
        with self._lock:
            self._metrics = SearchMetrics()
