"""Google Custom Search backend (licensed web search, key + engine id)."""

import httpx
from pydantic import Field

from src.search.interface import DEFAULT_TIMEOUT_SECONDS, SearchProvider
from src.search.models import SearchResult
from src.search.normalize import (
    UpstreamModel,
    build_result,
    decode_items,
    first_present,
    hostname_of,
    now_iso,
    request_token,
)


class CseImage(UpstreamModel):
    src: str | None = None


class VideoObject(UpstreamModel):
    embedurl: str | None = None
    url: str | None = None


class PageMap(UpstreamModel):
    cse_image: list[CseImage] = Field(default_factory=list)
    videoobject: list[VideoObject] = Field(default_factory=list)

    def image_url(self) -> str | None:
        return self.cse_image[0].src if self.cse_image else None

    def video_url(self) -> str | None:
        if not self.videoobject:
            return None
        video = self.videoobject[0]
        return first_present(video.embedurl, video.url)


class GoogleSearchItem(UpstreamModel):
    title: str | None = None
    snippet: str | None = None
    link: str | None = None
    pagemap: PageMap | None = None


class GoogleSearchBackend(SearchProvider):
    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        engine_id: str,
        *,
        url: str = "https://www.googleapis.com/customsearch/v1",
        num: int = 10,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(client, timeout)
        self._api_key = api_key.strip()
        self._engine_id = engine_id.strip()
        self._url = url
        # The Custom Search API caps num at 10
        self._num = min(max(1, num), 10)

    async def search(self, query: str) -> list[SearchResult]:
        params = {"key": self._api_key, "cx": self._engine_id, "q": query, "num": self._num}
        data = await self._get_json(self._url, params)
        token = request_token()
        fetched_at = now_iso()
        items = decode_items(GoogleSearchItem, data.get("items"), self.get_source_name())
        results: list[SearchResult] = []
        for i, item in enumerate(items):
            pagemap = item.pagemap or PageMap()
            results.append(
                build_result(
                    "web",
                    i,
                    token,
                    title=item.title,
                    description=item.snippet,
                    url=item.link,
                    image_url=pagemap.image_url(),
                    video_url=pagemap.video_url(),
                    source=hostname_of(item.link),
                    published_at=fetched_at,
                )
            )
        return results

    def get_source_name(self) -> str:
        return "google"

    def is_configured(self) -> bool:
        return bool(self._api_key and self._engine_id)
