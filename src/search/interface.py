"""Standard interface for upstream search providers used by the aggregator."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import httpx

from src.core.logger import logger
from src.search.errors import UpstreamError, UpstreamTimeoutError
from src.search.models import SearchResult

DEFAULT_TIMEOUT_SECONDS = 10.0


class SearchProvider(ABC):
    """Base for all upstream providers (news, web, instant answers, images).

    Providers share one injected ``httpx.AsyncClient``; each outbound call gets
    its own timeout so one slow provider never affects another request.
    """

    def __init__(self, client: httpx.AsyncClient, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self._client = client
        self._timeout = timeout

    @abstractmethod
    async def search(self, query: str) -> list[SearchResult]:
        """Fetch and normalize one batch. Raises UpstreamError on transport failure."""
        pass

    @abstractmethod
    def get_source_name(self) -> str:
        """Return provider name (e.g. 'newsapi', 'google')."""
        pass

    def is_configured(self) -> bool:
        return True

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        name = self.get_source_name()
        logger.provider_call(name, url)
        try:
            # httpx bounds each phase; the outer deadline bounds the whole call
            async with asyncio.timeout(self._timeout):
                response = await self._client.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=self._timeout,
                    follow_redirects=True,
                )
        except (httpx.TimeoutException, TimeoutError) as e:
            raise UpstreamTimeoutError(name, f"request timed out after {self._timeout:g}s") from e
        except httpx.HTTPError as e:
            raise UpstreamError(name, type(e).__name__) from e

        if response.is_error:
            raise UpstreamError(name, f"{response.status_code} {response.reason_phrase}".strip())

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"{name} returned a non-JSON body; treating as empty batch")
            return {}
        return data if isinstance(data, dict) else {}
