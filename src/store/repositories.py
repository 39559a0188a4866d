"""Repositories for user preferences and search history on top of DocumentStore."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.store.documents import DocumentStore

PREFERENCES_COLLECTION = "preferences"
SEARCH_HISTORY_COLLECTION = "searchHistory"


class HistoryFilters(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str
    sort_by: str = Field(default="relevancy", alias="sortBy")


class SearchHistoryEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    query: str
    timestamp: datetime
    results: Any | None = None
    filters: HistoryFilters | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class PreferencesRepository:
    def __init__(self, store: DocumentStore):
        self._store = store

    def get(self, user: str) -> dict[str, Any]:
        return self._store.get(PREFERENCES_COLLECTION, user) or {}

    def save(self, user: str, data: dict[str, Any]) -> dict[str, Any]:
        """Merge ``data`` into the user's stored preferences."""
        return self._store.set(PREFERENCES_COLLECTION, user, data, merge=True)


class SearchHistoryRepository:
    def __init__(self, store: DocumentStore):
        self._store = store

    @staticmethod
    def _entry(key: str, doc: dict[str, Any]) -> SearchHistoryEntry:
        return SearchHistoryEntry.model_validate({**doc, "id": key})

    def save(
        self,
        user: str,
        query: str,
        results: Any | None = None,
        filters: HistoryFilters | None = None,
    ) -> SearchHistoryEntry:
        doc = {
            "userId": user,
            "query": query,
            "timestamp": datetime.now(UTC).isoformat(),
            "results": results,
            "filters": filters.model_dump(by_alias=True) if filters else None,
        }
        key = self._store.add(SEARCH_HISTORY_COLLECTION, doc)
        return self._entry(key, doc)

    def recent(self, user: str, limit: int = 10) -> list[SearchHistoryEntry]:
        entries = [self._entry(k, d) for k, d in self._store.find(SEARCH_HISTORY_COLLECTION, "userId", user)]
        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[: max(0, limit)]

    def get(self, entry_id: str) -> SearchHistoryEntry | None:
        doc = self._store.get(SEARCH_HISTORY_COLLECTION, entry_id)
        return self._entry(entry_id, doc) if doc is not None else None

    def delete(self, entry_id: str) -> bool:
        return self._store.delete(SEARCH_HISTORY_COLLECTION, entry_id)

    def clear(self, user: str) -> int:
        removed = 0
        for key, _ in self._store.find(SEARCH_HISTORY_COLLECTION, "userId", user):
            if self._store.delete(SEARCH_HISTORY_COLLECTION, key):
                removed += 1
        return removed
