"""Error taxonomy for the search service. Each error knows its HTTP status and safe payload."""

from __future__ import annotations

from typing import Any


class SearchServiceError(Exception):
    """Base for errors that are reported to the caller as a JSON error body."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str | None = None, detail: str | None = None):
        self.message = message or self.error
        self.detail = detail
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.detail:
            payload["message"] = self.detail
        return payload


class ClientInputError(SearchServiceError):
    """Missing or invalid query/mode. Message is safe to show to end users."""

    status_code = 400
    error = "Invalid request"


class UnauthorizedError(SearchServiceError):
    status_code = 401
    error = "Unauthorized"


class ConfigurationError(SearchServiceError):
    """Credentials for the only applicable integration are absent."""

    status_code = 500
    error = "Search integration is not configured"


class UpstreamError(SearchServiceError):
    """A provider answered with a failure status or could not be reached."""

    status_code = 502
    error = "Upstream search provider error"

    def __init__(self, provider: str, status_text: str):
        self.provider = provider
        self.status_text = status_text
        super().__init__(self.error, f"{provider} error: {status_text}")


class UpstreamTimeoutError(UpstreamError):
    status_code = 504
    error = "Upstream search provider timed out"
