"""Unsplash photo search backend."""

import httpx

from src.search.interface import DEFAULT_TIMEOUT_SECONDS, SearchProvider
from src.search.models import SearchResult
from src.search.normalize import (
    UpstreamModel,
    build_result,
    decode_items,
    first_present,
    request_token,
)

PROVIDER_LABEL = "Unsplash"


class PhotoUrls(UpstreamModel):
    raw: str | None = None
    full: str | None = None
    regular: str | None = None
    small: str | None = None
    thumb: str | None = None


class PhotoLinks(UpstreamModel):
    html: str | None = None


class PhotoUser(UpstreamModel):
    name: str | None = None
    username: str | None = None


class UnsplashPhoto(UpstreamModel):
    id: str | None = None
    description: str | None = None
    alt_description: str | None = None
    urls: PhotoUrls | None = None
    links: PhotoLinks | None = None
    user: PhotoUser | None = None
    created_at: str | None = None


class UnsplashBackend(SearchProvider):
    def __init__(
        self,
        client: httpx.AsyncClient,
        access_key: str,
        *,
        base_url: str = "https://api.unsplash.com",
        per_page: int = 20,
        orientation: str = "landscape",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(client, timeout)
        self._access_key = access_key.strip()
        self._url = f"{base_url.rstrip('/')}/search/photos"
        self._per_page = per_page
        self._orientation = orientation

    async def search(self, query: str) -> list[SearchResult]:
        params = {"query": query, "per_page": self._per_page, "orientation": self._orientation}
        headers = {
            "Authorization": f"Client-ID {self._access_key}",
            "Accept-Version": "v1",
        }
        data = await self._get_json(self._url, params, headers=headers)
        token = request_token()
        photos = decode_items(UnsplashPhoto, data.get("results"), self.get_source_name())
        results: list[SearchResult] = []
        for i, photo in enumerate(photos):
            user = photo.user or PhotoUser()
            urls = photo.urls or PhotoUrls()
            author = first_present(user.name, user.username) or "Unknown"
            handle = first_present(user.username) or "unknown"
            results.append(
                build_result(
                    "img",
                    i,
                    token,
                    title=first_present(photo.description, photo.alt_description) or "Untitled",
                    description=f"Photo by {author} on {PROVIDER_LABEL}",
                    url=(photo.links.html if photo.links else None) or urls.regular,
                    image_url=urls.regular or urls.small,
                    source=f"{PROVIDER_LABEL}/@{handle}",
                    published_at=photo.created_at or "",
                )
            )
        return results

    def get_source_name(self) -> str:
        return "unsplash"

    def is_configured(self) -> bool:
        return bool(self._access_key)
