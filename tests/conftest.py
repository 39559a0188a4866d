from collections.abc import AsyncIterator, Sequence
from dataclasses import replace
from typing import Any

import httpx
import pytest
import pytest_asyncio

from src.core.config import Config, config


class UpstreamStub:
    """Routes outbound requests by host+path to canned JSON payloads and records every call."""

    def __init__(self) -> None:
        self._routes: dict[str, tuple[int, Any, Exception | None]] = {}
        self.calls: list[httpx.Request] = []

    def add(self, url: str, payload: Any = None, status: int = 200, exc: Exception | None = None) -> None:
        parsed = httpx.URL(url)
        self._routes[f"{parsed.host}{parsed.path}"] = (status, payload, exc)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = f"{request.url.host}{request.url.path}"
        if key not in self._routes:
            return httpx.Response(404, json={"error": "no stub for " + key})
        status, payload, exc = self._routes[key]
        if exc is not None:
            raise exc
        if isinstance(payload, (bytes, str)):
            return httpx.Response(status, content=payload)
        return httpx.Response(status, json=payload if payload is not None else {})

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [c for c in self.calls if c.url.host == host]


@pytest.fixture
def upstream() -> UpstreamStub:
    return UpstreamStub()


@pytest_asyncio.fixture
async def http_client(upstream: UpstreamStub) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)) as client:
        yield client


@pytest.fixture
def test_config(tmp_path) -> Config:
    """Config with every credential set and storage under tmp_path."""
    return replace(
        config,
        data_dir=tmp_path,
        documents_path=None,
        newsapi_key="news-key",
        google_search_api_key="google-key",
        google_search_engine_id="engine-id",
        unsplash_access_key="unsplash-key",
        newsapi_url="https://newsapi.org/v2",
        google_search_url="https://www.googleapis.com/customsearch/v1",
        duckduckgo_url="https://api.duckduckgo.com/",
        unsplash_url="https://api.unsplash.com",
        request_timeout_seconds=10.0,
        max_query_length=1000,
    )


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration/e2e tests that call the real upstream APIs.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers", "integration: requires network access or user configuration"
    )
    config.addinivalue_line("markers", "e2e: end-to-end runtime tests")
    config.addinivalue_line("markers", "property: property-based deterministic tests")


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: Sequence[pytest.Item],
) -> None:
    run_integration = config.getoption("--run-integration")
    skip_integration = pytest.mark.skip(
        reason="integration/e2e is opt-in; rerun with --run-integration"
    )

    for item in items:
        if "tests/e2e/" in item.nodeid:
            item.add_marker("integration")
            item.add_marker("e2e")
        if (
            item.get_closest_marker("integration") or item.get_closest_marker("e2e")
        ) and not run_integration:
            item.add_marker(skip_integration)
