"""NewsAPI backend: top-headlines (trending) and everything (full-text news)."""

from typing import Literal

import httpx

from src.search.interface import DEFAULT_TIMEOUT_SECONDS, SearchProvider
from src.search.models import SearchResult
from src.search.normalize import (
    UpstreamModel,
    build_result,
    decode_items,
    now_iso,
    request_token,
)

NewsEndpoint = Literal["everything", "top-headlines"]


class NewsApiSource(UpstreamModel):
    name: str | None = None


class NewsApiArticle(UpstreamModel):
    title: str | None = None
    description: str | None = None
    url: str | None = None
    urlToImage: str | None = None
    source: NewsApiSource | None = None
    publishedAt: str | None = None


class NewsApiBackend(SearchProvider):
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        endpoint: NewsEndpoint = "everything",
        *,
        base_url: str = "https://newsapi.org/v2",
        id_prefix: str = "news",
        page_size: int = 20,
        language: str = "en",
        country: str = "us",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(client, timeout)
        self._api_key = api_key.strip()
        self._endpoint = endpoint
        self._url = f"{base_url.rstrip('/')}/{endpoint}"
        self._id_prefix = id_prefix
        self._page_size = page_size
        self._language = language
        self._country = country

    async def search(self, query: str) -> list[SearchResult]:
        params: dict[str, str | int] = {
            "q": query,
            "apiKey": self._api_key,
            "pageSize": self._page_size,
            "language": self._language,
        }
        if self._endpoint == "top-headlines":
            params["country"] = self._country
        else:
            params["sortBy"] = "relevancy"

        data = await self._get_json(self._url, params)
        token = request_token()
        fetched_at = now_iso()
        articles = decode_items(NewsApiArticle, data.get("articles"), self.get_source_name())
        return [
            build_result(
                self._id_prefix,
                i,
                token,
                title=article.title,
                description=article.description,
                url=article.url,
                image_url=article.urlToImage,
                source=(article.source.name if article.source else None) or "Unknown",
                published_at=article.publishedAt or fetched_at,
            )
            for i, article in enumerate(articles)
        ]

    def get_source_name(self) -> str:
        return "newsapi" if self._endpoint == "everything" else "newsapi-headlines"

    def is_configured(self) -> bool:
        return bool(self._api_key)
