"""Request and result models for aggregated search."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.search.errors import ClientInputError


class SearchMode(StrEnum):
    WEB = "web"
    NEWS = "news"
    TRENDING = "trending"
    IMAGES = "images"


_MODE_CHOICES = ", ".join(f'"{m.value}"' for m in SearchMode)


class SearchRequest(BaseModel):
    """Validated (query, mode) pair. Build with `parse` to get client-facing errors."""

    query: str = Field(min_length=1)
    mode: SearchMode = SearchMode.WEB

    @classmethod
    def parse(cls, query: str | None, mode: str | None, max_length: int = 1000) -> "SearchRequest":
        text = (query or "").strip()
        if not text:
            raise ClientInputError("Query parameter is required")
        if len(text) > max_length:
            raise ClientInputError(
                "Query too long",
                f"Search query must be at most {max_length} characters",
            )
        raw_mode = (mode or SearchMode.WEB.value).strip().lower()
        try:
            parsed_mode = SearchMode(raw_mode)
        except ValueError:
            raise ClientInputError(f"Invalid mode. Use {_MODE_CHOICES}") from None
        return cls(query=text, mode=parsed_mode)


class SearchResult(BaseModel):
    """One normalized result, identical in shape whichever provider produced it."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = Field(min_length=1)
    description: str
    url: str
    image_url: str | None = Field(default=None, alias="imageUrl")
    video_url: str | None = Field(default=None, alias="videoUrl")
    source: str
    published_at: str = Field(alias="publishedAt")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class SearchResponse(BaseModel):
    results: list[SearchResult] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {"results": [r.to_wire() for r in self.results]}


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None
