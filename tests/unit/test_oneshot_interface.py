from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest

from src.interfaces.oneshot import run_oneshot
from src.search.errors import UpstreamError
from src.search.models import SearchResult


@pytest.mark.asyncio
async def test_run_oneshot_prints_results_json(monkeypatch, capsys):
    result = SearchResult(
        id="news-0-1",
        title="Headline",
        description="Body",
        url="https://example.com/a",
        source="Example",
        published_at="2026-01-01T00:00:00Z",
    )
    run = AsyncMock(return_value=[result])
    monkeypatch.setattr("src.interfaces.oneshot.SearchAggregator.run", run)

    code = await run_oneshot("headline", mode="news")

    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["results"][0]["title"] == "Headline"
    run.assert_awaited_once_with("headline", "news")


@pytest.mark.asyncio
async def test_run_oneshot_rejects_empty_query(capsys):
    code = await run_oneshot("   ")
    out = capsys.readouterr().out
    assert code == 2
    assert "Query parameter is required" in out


@pytest.mark.asyncio
async def test_run_oneshot_reports_service_errors(monkeypatch, capsys):
    monkeypatch.setattr(
        "src.interfaces.oneshot.SearchAggregator.run",
        AsyncMock(side_effect=UpstreamError("newsapi", "503 Service Unavailable")),
    )

    code = await run_oneshot("rust", mode="news")

    out = json.loads(capsys.readouterr().out)
    assert code == 1
    assert out["message"] == "newsapi error: 503 Service Unavailable"
