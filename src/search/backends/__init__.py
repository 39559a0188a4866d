from src.search.backends.duckduckgo import DuckDuckGoBackend
from src.search.backends.google import GoogleSearchBackend
from src.search.backends.newsapi import NewsApiBackend
from src.search.backends.unsplash import UnsplashBackend

__all__ = [
    "DuckDuckGoBackend",
    "GoogleSearchBackend",
    "NewsApiBackend",
    "UnsplashBackend",
]
