import time

import pytest

from sitesearch.search.cache import SearchCache, make_cache_key


def make_cache(clock, **kwargs):
    kwargs.setdefault("sweep_interval", None)
    return SearchCache(clock=clock, **kwargs)


def test_get_returns_value_until_expiry(clock):
    cache = make_cache(clock, default_ttl=1000)
    cache.set("k", "v")

    clock.advance(1000)
    assert cache.get("k") == "v"

    clock.advance(1)
    assert cache.get("k") is None
    assert len(cache) == 0


def test_evicts_oldest_insertion_when_full(clock):
    cache = make_cache(clock, max_size=2)
    cache.set("a", 1)
    clock.advance(1)
    cache.set("b", 2)
    clock.advance(1)

    # reads never reorder entries
    assert cache.get("a") == 1
    cache.set("c", 3)

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_equal_timestamps_evict_first_insertion(clock):
    cache = make_cache(clock, max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert len(cache) == 2


def test_reset_existing_key_does_not_evict(clock):
    cache = make_cache(clock, max_size=2)
    cache.set("a", 1)
    clock.advance(1)
    cache.set("b", 2)
    clock.advance(1)
    cache.set("a", 10)

    assert len(cache) == 2
    assert cache.get("a") == 10

    # "a" was re-written, so "b" is now the oldest
    clock.advance(1)
    cache.set("c", 3)
    assert cache.get("b") is None
    assert cache.get("a") == 10


def test_custom_ttl_overrides_default(clock):
    cache = make_cache(clock, default_ttl=10_000)
    cache.set("short", 1, ttl=100)
    cache.set("long", 2)

    clock.advance(500)
    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_rejects_invalid_sizes_and_ttls(clock):
    with pytest.raises(ValueError):
        SearchCache(max_size=0, sweep_interval=None)
    with pytest.raises(ValueError):
        SearchCache(default_ttl=0, sweep_interval=None)

    cache = make_cache(clock)
    with pytest.raises(ValueError):
        cache.set("k", "v", ttl=0)


def test_cleanup_removes_only_expired(clock):
    cache = make_cache(clock, default_ttl=1000)
    cache.set("old", 1, ttl=100)
    cache.set("fresh", 2)

    clock.advance(200)
    assert cache.cleanup() == 1
    assert len(cache) == 1
    assert cache.get("fresh") == 2


def test_background_sweep_runs_and_stops():
    cache = SearchCache(default_ttl=1, sweep_interval=0.02)
    try:
        cache.set("k", "v")
        deadline = time.time() + 2
        while len(cache) and time.time() < deadline:
            time.sleep(0.02)
        assert len(cache) == 0
    finally:
        cache.close()


def test_stats_track_hits_and_misses(clock):
    cache = make_cache(clock, max_size=5)
    cache.set("k", "v")
    cache.get("k")
    cache.get("missing")

    stats = cache.stats()
    assert stats["size"] == 1
    assert stats["max_size"] == 5
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 0.5

    cache.clear()
    assert cache.stats()["hits"] == 0
    assert len(cache) == 0


def test_query_helpers_normalize_query(clock):
    cache = make_cache(clock)
    cache.set_with_query("  Carbon ", {"type": "all"}, "result")

    assert cache.get_with_query("carbon", {"type": "all"}) == "result"
    assert cache.get_with_query("carbon", {"type": "news"}) is None


def test_cache_key_ignores_filter_order():
    a = make_cache_key("ESG", {"limit": 20, "filters": {"type": "all", "sortBy": "date"}})
    b = make_cache_key("esg ", {"filters": {"sortBy": "date", "type": "all"}, "limit": 20})

    assert a == b
    assert a.startswith("esg::")
    assert make_cache_key("esg", {"limit": 10}) != make_cache_key("esg", {"limit": 20})
