import asyncio

import httpx
import pytest

from sitesearch.search.errors import TransportError


def remote(request):
    result = {"id": "remote-1", "type": "news", "title": "碳 remote", "url": "/remote-1"}
    return httpx.Response(200, json={"results": [result], "total": 1, "query": request.url.params["q"]})


def test_make_client_shares_app_services(app):
    services = app.extensions["sitesearch"]
    client = services.make_client(http_client=httpx.AsyncClient(transport=httpx.MockTransport(remote)))

    assert client.base_url == services.config.search_api_url.rstrip("/")
    assert client.timeout == services.config.search_api_timeout
    assert client.results_cache is services.results_cache
    assert client.deduplicator is services.deduplicator
    assert client.monitor is services.monitor
    assert client.persistent_cache is services.persistent_results
    assert client.fallback is services.engine

    response = asyncio.run(client.search("碳"))

    assert [r.id for r in response.results] == ["remote-1"]
    assert len(services.results_cache) == 1
    assert services.monitor.get_stats()["totalSearches"] == 1


def test_make_client_overrides(app):
    services = app.extensions["sitesearch"]
    client = services.make_client("http://other.test/api/search/", timeout=3)

    assert client.base_url == "http://other.test/api/search"
    assert client.timeout == 3
    assert client.results_cache is services.results_cache


def test_made_client_falls_back_to_app_index(app):
    services = app.extensions["sitesearch"]

    def down(request):
        raise httpx.ConnectError("refused", request=request)

    client = services.make_client(http_client=httpx.AsyncClient(transport=httpx.MockTransport(down)))

    response = asyncio.run(client.search_with_fallback("碳足迹"))
    assert response.results[0].id == "carbon-footprint-assessment"
    assert services.monitor.snapshot()["errors"] == 1

    with pytest.raises(TransportError):
        asyncio.run(client.search("碳足迹"))
