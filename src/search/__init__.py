"""Aggregated search: provider chains for web, news, trending and images."""

from src.search.aggregator import SearchAggregator
from src.search.interface import SearchProvider
from src.search.models import SearchMode, SearchRequest, SearchResponse, SearchResult

__all__ = [
    "SearchAggregator",
    "SearchMode",
    "SearchProvider",
    "SearchRequest",
    "SearchResponse",
    "SearchResult",
]
