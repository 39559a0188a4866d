"""One-shot interface: run a single aggregated search, print JSON, exit."""

from __future__ import annotations

import asyncio
import json

import httpx

from src.core.config import config
from src.search.aggregator import SearchAggregator
from src.search.errors import ClientInputError, SearchServiceError
from src.search.models import SearchResponse


async def run_oneshot(query: str, mode: str = "web") -> int:
    async with httpx.AsyncClient() as client:
        aggregator = SearchAggregator.from_config(config, client)
        try:
            results = await aggregator.run(query, mode)
        except ClientInputError as e:
            print(f"Error: {e.message}")
            return 2
        except SearchServiceError as e:
            print(json.dumps(e.to_payload(), indent=2))
            return 1
    print(json.dumps(SearchResponse(results=results).to_wire(), indent=2))
    return 0


def main(query: str, mode: str = "web") -> int:
    return asyncio.run(run_oneshot(query=query, mode=mode))
