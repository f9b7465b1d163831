import asyncio
import json

import httpx
import pytest

from sitesearch.cache import MemoryBackend
from sitesearch.search.cache import SearchCache
from sitesearch.search.client import LARGE_RESULT_TTL, SMALL_RESULT_TTL, SearchClient, result_ttl
from sitesearch.search.errors import TransportError
from sitesearch.search.index import ContentIndex
from sitesearch.search.inflight import RequestDeduplicator
from sitesearch.search.local_search import LocalSearchEngine
from sitesearch.search.models import SearchFilters, SearchResponse, TypeFilter
from sitesearch.search.monitor import PerformanceMonitor
from sitesearch.search.persistent import RESULTS_PREFIX, PersistentCache

BASE_URL = "http://search.test/api/search"


def item(i):
    return {"id": f"doc-{i}", "type": "page", "title": f"碳 {i}", "excerpt": "", "content": "", "url": f"/{i}"}


def payload(query, count=2):
    results = [item(i) for i in range(count)]
    return {"results": results, "total": count, "suggestions": results[:5], "query": query, "took": 1.5}


def make_client(handler, store=None, fallback=None):
    calls = []

    async def recording(request):
        calls.append(request)
        await asyncio.sleep(0.01)
        return handler(request)

    persistent = PersistentCache(store, prefix=RESULTS_PREFIX) if store is not None else None
    client = SearchClient(
        BASE_URL,
        results_cache=SearchCache(max_size=10, sweep_interval=None),
        deduplicator=RequestDeduplicator(),
        monitor=PerformanceMonitor(),
        persistent_cache=persistent,
        fallback=fallback,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(recording)),
    )
    return client, calls


def ok(request):
    return httpx.Response(200, json=payload(request.url.params["q"]))


def test_search_sends_filters_and_parses_response():
    client, calls = make_client(ok)

    async def run():
        async with client:
            return await client.search("碳", SearchFilters(type=TypeFilter.NEWS), limit=5, offset=10)

    response = asyncio.run(run())

    params = calls[0].url.params
    assert params["q"] == "碳"
    assert params["type"] == "news"
    assert params["timeRange"] == "all"
    assert params["sortBy"] == "relevance"
    assert params["limit"] == "5"
    assert params["offset"] == "10"
    assert params["includeContent"] == "false"
    assert response.total == 2
    assert response.results[0].id == "doc-0"


def test_second_search_hits_cache():
    client, calls = make_client(ok)

    async def run():
        await client.search("esg")
        return await client.search("  ESG ")

    response = asyncio.run(run())

    assert len(calls) == 1
    assert response.query == "esg"
    stats = client.monitor.get_stats()
    assert stats["totalSearches"] == 2
    assert stats["cacheHitRate"] == 0.5


def test_concurrent_identical_searches_share_one_request():
    client, calls = make_client(ok)

    async def run():
        return await asyncio.gather(*(client.search("碳中和") for _ in range(5)))

    responses = asyncio.run(run())

    assert len(calls) == 1
    assert all(r.total == 2 for r in responses)


def test_returned_responses_are_independent_copies():
    client, _ = make_client(ok)

    async def run():
        first = await client.search("esg")
        first.results.clear()
        return await client.search("esg")

    assert len(asyncio.run(run()).results) == 2


def test_result_ttl_depends_on_result_count():
    small = SearchResponse.from_dict(payload("q", count=10))
    large = SearchResponse.from_dict(payload("q", count=11))

    assert result_ttl(small) == SMALL_RESULT_TTL
    assert result_ttl(large) == LARGE_RESULT_TTL


def test_successful_search_is_persisted_and_restored():
    store = MemoryBackend()
    client, calls = make_client(ok, store=store)
    asyncio.run(client.search("碳"))

    key = RESULTS_PREFIX + SearchClient.cache_key("碳", SearchFilters(), 20, 0)
    envelope = json.loads(store.get(key))
    assert envelope["data"]["total"] == 2

    # a new client sharing the store answers without the network
    second, second_calls = make_client(ok, store=store)
    response = asyncio.run(second.search("碳"))

    assert second_calls == []
    assert response.total == 2
    assert second.monitor.get_stats()["cacheHitRate"] == 1


@pytest.mark.parametrize("handler", [
    lambda request: httpx.Response(503),
    lambda request: httpx.Response(200, text="<html>not json</html>"),
    lambda request: httpx.Response(200, json={"results": [{"title": "missing id"}]}),
    lambda request: httpx.Response(200, content=b"null", headers={"Content-Type": "application/json"}),
    lambda request: httpx.Response(200, json=[]),
    lambda request: httpx.Response(200, json="oops"),
    lambda request: httpx.Response(200, json=42),
    lambda request: httpx.Response(200, json={"results": ["doc-1"]}),
])
def test_failures_become_transport_errors(handler):
    client, _ = make_client(handler)

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(client.search("esg"))

    assert str(exc_info.value) == TransportError.USER_MESSAGE
    assert exc_info.value.__cause__ is not None
    assert client.monitor.snapshot()["errors"] == 1
    assert len(client.results_cache) == 0


def test_connection_error_becomes_transport_error():
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    client, _ = make_client(refuse)
    with pytest.raises(TransportError):
        asyncio.run(client.search("esg"))


@pytest.mark.parametrize("failure", [
    httpx.Response(500),
    httpx.Response(200, json=["not", "an", "object"]),
])
def test_fallback_uses_local_engine(failure):
    engine = LocalSearchEngine(ContentIndex.from_dicts([item(7)]))
    client, _ = make_client(lambda request: failure, fallback=engine)

    response = asyncio.run(client.search_with_fallback("碳"))

    assert [r.id for r in response.results] == ["doc-7"]


def test_fallback_without_engine_reraises():
    client, _ = make_client(lambda request: httpx.Response(500))
    with pytest.raises(TransportError):
        asyncio.run(client.search_with_fallback("碳"))


def test_get_suggestions():
    def handler(request):
        assert request.url.path == "/api/search/suggestions"
        return httpx.Response(200, json={"suggestions": [{"text": "碳中和", "category": "服务", "count": 156}]})

    client, calls = make_client(handler)

    assert asyncio.run(client.get_suggestions("x")) == []
    assert calls == []

    suggestions = asyncio.run(client.get_suggestions("碳中"))
    assert suggestions[0].text == "碳中和"
    assert suggestions[0].count == 156


def test_get_suggestions_swallows_failures():
    client, _ = make_client(lambda request: httpx.Response(500))
    assert asyncio.run(client.get_suggestions("碳中")) == []


@pytest.mark.parametrize("body", [[], "oops", 42, {"suggestions": "碳中和"}])
def test_get_suggestions_ignores_unexpected_bodies(body):
    client, _ = make_client(lambda request: httpx.Response(200, json=body))
    assert asyncio.run(client.get_suggestions("碳中")) == []


def test_track_search_posts_event():
    def handler(request):
        body = json.loads(request.content)
        assert request.method == "POST"
        assert request.url.path == "/api/search/analytics"
        assert body["eventType"] == "click"
        assert body["clickedResult"] == {"id": "doc-1", "position": 0}
        return httpx.Response(200, json={"success": True})

    client, _ = make_client(handler)
    assert asyncio.run(client.track_search("碳", 3, {"id": "doc-1", "position": 0})) is True


def test_track_search_never_raises():
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    client, _ = make_client(refuse)
    assert asyncio.run(client.track_search("碳", 3)) is False
