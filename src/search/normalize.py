"""Shared constructor and helpers used by every backend to build SearchResult records."""

import time
from datetime import UTC, datetime
from typing import Any, TypeVar
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from src.core.logger import logger
from src.search.models import SearchResult

T = TypeVar("T", bound=BaseModel)

NO_TITLE = "No title"
NO_DESCRIPTION = "No description available"
UNKNOWN_HOST = "unknown"


class UpstreamModel(BaseModel):
    """Provider payload record. A field of the wrong shape falls back to its default;
    the rest of the record is kept.
    """

    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_on_bad_shape(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


def request_token() -> int:
    """Millisecond request time, embedded in ids to keep them unique within a response."""
    return time.time_ns() // 1_000_000


def now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def make_id(prefix: str, index: int, token: int) -> str:
    return f"{prefix}-{index}-{token}"


def hostname_of(url: str | None) -> str:
    if not url:
        return UNKNOWN_HOST
    try:
        host = urlparse(url.strip()).hostname
    except ValueError:
        return UNKNOWN_HOST
    return host or UNKNOWN_HOST


def first_present(*values: str | None) -> str | None:
    for v in values:
        if v and v.strip():
            return v
    return None


def decode_items(model: type[T], raw: Any, provider: str) -> list[T]:
    """Decode a provider batch leniently: a missing or non-list batch is empty, non-object entries are skipped."""
    if not isinstance(raw, list):
        return []
    items: list[T] = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            continue
        try:
            items.append(model.model_validate(entry))
        except ValidationError as e:
            logger.debug(f"{provider}: dropping malformed item {i}: {e.error_count()} errors")
    return items


def build_result(
    prefix: str,
    index: int,
    token: int,
    *,
    title: str | None,
    description: str | None,
    url: str | None,
    source: str,
    published_at: str,
    image_url: str | None = None,
    video_url: str | None = None,
) -> SearchResult:
    return SearchResult(
        id=make_id(prefix, index, token),
        title=first_present(title) or NO_TITLE,
        description=first_present(description) or NO_DESCRIPTION,
        url=url or "",
        image_url=first_present(image_url),
        video_url=first_present(video_url),
        source=source,
        published_at=published_at,
    )
