from src.store.documents import DocumentStore
from src.store.repositories import (
    HistoryFilters,
    PreferencesRepository,
    SearchHistoryEntry,
    SearchHistoryRepository,
)

__all__ = [
    "DocumentStore",
    "HistoryFilters",
    "PreferencesRepository",
    "SearchHistoryEntry",
    "SearchHistoryRepository",
]
