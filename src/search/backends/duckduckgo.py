"""DuckDuckGo Instant Answer backend (keyless).

The API returns at most one abstract plus a list of related topics. Topics may
be grouped (``{"Name": ..., "Topics": [...]}``); groups are flattened one level.
"""

from typing import Any

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

TOPIC_TITLE_SEPARATOR = " - "
_ASSET_BASE = "https://duckduckgo.com"


def _absolute(url: str | None) -> str | None:
    if not url:
        return None
    if url.startswith("/"):
        return _ASSET_BASE + url
    return url


def topic_title(text: str) -> str:
    return text.split(TOPIC_TITLE_SEPARATOR, 1)[0].strip()


class TopicIcon(UpstreamModel):
    URL: str | None = None


class RelatedTopic(UpstreamModel):
    Text: str | None = None
    FirstURL: str | None = None
    Icon: TopicIcon | None = None


class InstantAnswer(UpstreamModel):
    Heading: str | None = None
    AbstractText: str | None = None
    AbstractURL: str | None = None
    AbstractSource: str | None = None
    Image: str | None = None
    RelatedTopics: list[Any] = Field(default_factory=list)


def flatten_topics(raw: Any) -> list[Any]:
    """Expand grouped topics one level; deeper nesting is ignored."""
    if not isinstance(raw, list):
        return []
    flat: list[Any] = []
    for entry in raw:
        if isinstance(entry, dict) and isinstance(entry.get("Topics"), list):
            flat.extend(t for t in entry["Topics"] if not (isinstance(t, dict) and "Topics" in t))
        else:
            flat.append(entry)
    return flat


class DuckDuckGoBackend(SearchProvider):
    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        url: str = "https://api.duckduckgo.com/",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        super().__init__(client, timeout)
        self._url = url

    async def search(self, query: str) -> list[SearchResult]:
        params = {"q": query, "format": "json", "no_html": 1, "skip_disambig": 1}
        data = await self._get_json(self._url, params)
        token = request_token()
        fetched_at = now_iso()
        answer = InstantAnswer.model_validate(data)

        results: list[SearchResult] = []
        if first_present(answer.AbstractText) and first_present(answer.AbstractURL):
            results.append(
                build_result(
                    "ddg",
                    0,
                    token,
                    title=first_present(answer.Heading) or query,
                    description=answer.AbstractText,
                    url=answer.AbstractURL,
                    image_url=_absolute(answer.Image),
                    source=first_present(answer.AbstractSource) or hostname_of(answer.AbstractURL),
                    published_at=fetched_at,
                )
            )

        topics = decode_items(RelatedTopic, flatten_topics(answer.RelatedTopics), self.get_source_name())
        for topic in topics:
            text = first_present(topic.Text)
            url = first_present(topic.FirstURL)
            if not text or not url:
                continue
            results.append(
                build_result(
                    "ddg",
                    len(results),
                    token,
                    title=topic_title(text),
                    description=text,
                    url=url,
                    image_url=_absolute(topic.Icon.URL if topic.Icon else None),
                    source=hostname_of(url),
                    published_at=fetched_at,
                )
            )
        return results

    def get_source_name(self) -> str:
        return "duckduckgo"
