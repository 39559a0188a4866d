"""Search aggregator: per-mode provider chains with sequential fallback."""

import uuid

import httpx

from src.core.config import Config
from src.core.logger import logger
from src.search.backends import (
    DuckDuckGoBackend,
    GoogleSearchBackend,
    NewsApiBackend,
    UnsplashBackend,
)
from src.search.errors import ConfigurationError, UpstreamError
from src.search.interface import SearchProvider
from src.search.models import SearchMode, SearchRequest, SearchResult

_UNCONFIGURED_MESSAGES = {
    SearchMode.NEWS: "NewsAPI key is not configured",
    SearchMode.TRENDING: "NewsAPI key is not configured",
    SearchMode.WEB: "No search API keys configured (Google Search or NewsAPI)",
    SearchMode.IMAGES: "Unsplash access key is not configured",
}


class SearchAggregator:
    """Runs the provider chain for a mode, one provider at a time.

    The first configured provider that returns a non-empty batch wins; later
    providers in the chain are never called. A provider that fails is logged
    and the chain moves on. When the chain is exhausted:

    - no provider was configured -> ConfigurationError
    - every attempted provider failed -> the last UpstreamError
    - otherwise (a provider answered with nothing) -> []
    """

    def __init__(self, chains: dict[SearchMode, list[SearchProvider]], max_query_length: int = 1000):
        self._chains = {mode: list(chains.get(mode, [])) for mode in SearchMode}
        self._max_query_length = max_query_length

    @classmethod
    def from_config(cls, cfg: Config, client: httpx.AsyncClient) -> "SearchAggregator":
        timeout = cfg.request_timeout_seconds
        news = dict(
            base_url=cfg.newsapi_url,
            page_size=cfg.news_page_size,
            language=cfg.news_language,
            country=cfg.news_country,
            timeout=timeout,
        )
        chains: dict[SearchMode, list[SearchProvider]] = {
            SearchMode.TRENDING: [
                NewsApiBackend(client, cfg.newsapi_key, "top-headlines", id_prefix="news", **news),
            ],
            SearchMode.NEWS: [
                NewsApiBackend(client, cfg.newsapi_key, "everything", id_prefix="news", **news),
            ],
            SearchMode.WEB: [
                GoogleSearchBackend(
                    client,
                    cfg.google_search_api_key,
                    cfg.google_search_engine_id,
                    url=cfg.google_search_url,
                    num=cfg.web_page_size,
                    timeout=timeout,
                ),
                DuckDuckGoBackend(client, url=cfg.duckduckgo_url, timeout=timeout),
                NewsApiBackend(client, cfg.newsapi_key, "everything", id_prefix="web-fallback", **news),
            ],
            SearchMode.IMAGES: [
                UnsplashBackend(
                    client,
                    cfg.unsplash_access_key,
                    base_url=cfg.unsplash_url,
                    per_page=cfg.image_page_size,
                    orientation=cfg.image_orientation,
                    timeout=timeout,
                ),
            ],
        }
        return cls(chains, max_query_length=cfg.max_query_length)

    def chain(self, mode: SearchMode) -> list[SearchProvider]:
        return list(self._chains[mode])

    async def run(self, query: str | None, mode: str | None) -> list[SearchResult]:
        """Validate raw input, then search. Invalid input never reaches a provider."""
        request = SearchRequest.parse(query, mode, self._max_query_length)
        return await self.search(request)

    async def search(self, request: SearchRequest) -> list[SearchResult]:
        logger.request_received(uuid.uuid4().hex[:12], request.mode.value, request.query)
        attempted = 0
        answered = False
        last_error: UpstreamError | None = None

        for provider in self._chains[request.mode]:
            name = provider.get_source_name()
            if not provider.is_configured():
                logger.provider_skipped(name)
                continue
            attempted += 1
            try:
                results = await provider.search(request.query)
            except UpstreamError as e:
                logger.provider_failed(name, e.detail or e.message)
                last_error = e
                continue
            logger.provider_result(name, len(results))
            if results:
                logger.request_completed(name, len(results))
                return results
            answered = True

        if attempted == 0:
            logger.request_completed(None, 0, success=False)
            raise ConfigurationError(_UNCONFIGURED_MESSAGES[request.mode])
        if not answered and last_error is not None:
            logger.request_completed(last_error.provider, 0, success=False)
            raise last_error
        logger.request_completed(None, 0)
        return []
