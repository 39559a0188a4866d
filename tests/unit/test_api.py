from __future__ import annotations

import asyncio
from dataclasses import replace

import httpx
import pytest
from fastapi.testclient import TestClient

from src.api.app import NO_CACHE_HEADERS, USER_HEADER, create_app
from src.search.aggregator import SearchAggregator
from src.store import DocumentStore
from upstream_payloads import GOOGLE_ITEMS, NEWS_ARTICLES


@pytest.fixture
def api(upstream, test_config):
    """TestClient wired to stubbed upstreams through the real aggregator."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    aggregator = SearchAggregator.from_config(test_config, client)
    app = create_app(test_config, aggregator=aggregator, store=DocumentStore())
    with TestClient(app) as test_client:
        yield test_client


def _assert_no_cache(response) -> None:
    for name, value in NO_CACHE_HEADERS.items():
        assert response.headers[name] == value


@pytest.mark.parametrize("mode", ["web", "news", "trending", "images"])
def test_empty_query_is_400_without_upstream_calls(api, upstream, mode):
    response = api.get("/api/search", params={"q": "", "mode": mode})

    assert response.status_code == 400
    assert response.json() == {"error": "Query parameter is required"}
    assert upstream.calls == []
    _assert_no_cache(response)


def test_invalid_mode_is_400(api, upstream):
    response = api.get("/api/search", params={"q": "python", "mode": "videos"})

    assert response.status_code == 400
    assert "Invalid mode" in response.json()["error"]
    assert upstream.calls == []


def test_news_search_returns_results_envelope(api, upstream):
    upstream.add("https://newsapi.org/v2/everything", NEWS_ARTICLES)

    response = api.get("/api/search", params={"query": "rust", "mode": "news"})

    assert response.status_code == 200
    _assert_no_cache(response)
    results = response.json()["results"]
    assert len(results) == 3
    assert set(results[0]) == {"id", "title", "description", "url", "imageUrl", "source", "publishedAt"}
    assert results[0]["source"] == "BBC News"


def test_q_takes_precedence_over_query(api, upstream):
    upstream.add("https://www.googleapis.com/customsearch/v1", GOOGLE_ITEMS)

    api.get("/api/search", params={"q": "first", "query": "second"})

    assert upstream.calls[0].url.params["q"] == "first"


def test_missing_credentials_is_configuration_error(upstream, test_config):
    cfg = replace(test_config, unsplash_access_key="")
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    app = create_app(cfg, aggregator=SearchAggregator.from_config(cfg, client), store=DocumentStore())

    with TestClient(app) as test_client:
        response = test_client.get("/api/search", params={"q": "lakes", "mode": "images"})

    assert response.status_code == 500
    assert response.json() == {"error": "Unsplash access key is not configured"}
    assert upstream.calls == []


def test_upstream_failure_is_502_with_status_text(api, upstream):
    upstream.add("https://newsapi.org/v2/top-headlines", {"status": "error"}, status=500)

    response = api.get("/api/search", params={"q": "rust", "mode": "trending"})

    assert response.status_code == 502
    body = response.json()
    assert body["error"] == "Upstream search provider error"
    assert "500 Internal Server Error" in body["message"]
    assert "news-key" not in response.text


def test_upstream_timeout_is_504(api, upstream):
    upstream.add("https://newsapi.org/v2/everything", exc=httpx.ReadTimeout("slow"))

    response = api.get("/api/search", params={"q": "rust", "mode": "news"})

    assert response.status_code == 504


def test_unexpected_failure_is_generic_500(test_config):
    class Broken:
        async def search(self, request):
            raise RuntimeError("secret internals")

    app = create_app(test_config, aggregator=Broken(), store=DocumentStore())
    with TestClient(app) as test_client:
        response = test_client.get("/api/search", params={"q": "rust"})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "secret" not in response.text
    _assert_no_cache(response)


def test_search_with_user_records_history(api, upstream):
    upstream.add("https://newsapi.org/v2/everything", NEWS_ARTICLES)

    api.get("/api/search", params={"q": "rust", "mode": "news"}, headers={USER_HEADER: "ada@example.com"})
    response = api.get("/api/history", headers={USER_HEADER: "ada@example.com"})

    history = response.json()["history"]
    assert len(history) == 1
    assert history[0]["query"] == "rust"
    assert history[0]["filters"] == {"source": "news", "sortBy": "relevancy"}
    assert history[0]["results"] == 3


def test_preferences_require_user(api):
    assert api.get("/api/preferences").status_code == 401
    assert api.post("/api/preferences", json={"theme": "dark"}).status_code == 401


def test_preferences_round_trip_with_merge(api):
    headers = {USER_HEADER: "ada@example.com"}

    assert api.get("/api/preferences", headers=headers).json() == {}
    assert api.post("/api/preferences", json={"theme": "dark", "mode": "web"}, headers=headers).json() == {"ok": True}
    api.post("/api/preferences", json={"mode": "news"}, headers=headers)

    assert api.get("/api/preferences", headers=headers).json() == {"theme": "dark", "mode": "news"}
    assert api.get("/api/preferences", headers={USER_HEADER: "bob@example.com"}).json() == {}


def test_history_item_is_scoped_to_owner(api, upstream):
    upstream.add("https://newsapi.org/v2/everything", NEWS_ARTICLES)
    ada = {USER_HEADER: "ada@example.com"}
    bob = {USER_HEADER: "bob@example.com"}
    api.get("/api/search", params={"q": "rust", "mode": "news"}, headers=ada)
    entry_id = api.get("/api/history", headers=ada).json()["history"][0]["id"]

    assert api.get(f"/api/history/{entry_id}", headers=bob).status_code == 404
    assert api.delete(f"/api/history/{entry_id}", headers=bob).status_code == 404
    assert api.get(f"/api/history/{entry_id}", headers=ada).json()["query"] == "rust"
    assert api.delete(f"/api/history/{entry_id}", headers=ada).json() == {"ok": True}
    assert api.get(f"/api/history/{entry_id}", headers=ada).status_code == 404


def test_clear_history(api, upstream):
    upstream.add("https://newsapi.org/v2/everything", NEWS_ARTICLES)
    ada = {USER_HEADER: "ada@example.com"}
    for q in ("one", "two"):
        api.get("/api/search", params={"q": q, "mode": "news"}, headers=ada)

    assert api.delete("/api/history", headers=ada).json() == {"ok": True, "removed": 2}
    assert api.get("/api/history", headers=ada).json() == {"history": []}


def test_health_reports_integrations(api):
    response = api.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["integrations"] == {
        "newsapi": True,
        "google_search": True,
        "duckduckgo": True,
        "unsplash": True,
    }
    _assert_no_cache(response)


class LoopTrackingStore(DocumentStore):
    """Records, for every write, whether it ran on the event loop thread."""

    def __init__(self) -> None:
        super().__init__()
        self.writes_on_loop: list[bool] = []

    def _flush(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.writes_on_loop.append(False)
        else:
            self.writes_on_loop.append(True)


def test_store_writes_run_off_the_event_loop(upstream, test_config):
    upstream.add("https://newsapi.org/v2/everything", NEWS_ARTICLES)
    store = LoopTrackingStore()
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    app = create_app(test_config, aggregator=SearchAggregator.from_config(test_config, client), store=store)
    ada = {USER_HEADER: "ada@example.com"}

    with TestClient(app) as api:
        api.get("/api/search", params={"q": "rust", "mode": "news"}, headers=ada)
        api.post("/api/preferences", json={"theme": "dark"}, headers=ada)
        api.delete("/api/history", headers=ada)

    assert len(store.writes_on_loop) == 3
    assert not any(store.writes_on_loop)
