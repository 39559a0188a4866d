"""Configuration from environment variables (.env)."""

import os
from pathlib import Path
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class Config:
    project_root: Path
    data_dir: Path
    logs_dir: Path
    documents_path: Path | None
    newsapi_key: str
    google_search_api_key: str
    google_search_engine_id: str
    unsplash_access_key: str
    newsapi_url: str
    google_search_url: str
    duckduckgo_url: str
    unsplash_url: str
    request_timeout_seconds: float  # Per upstream call; exceeding it fails that provider
    max_query_length: int
    news_page_size: int
    web_page_size: int
    image_page_size: int
    news_language: str
    news_country: str
    image_orientation: str
    http_host: str
    http_port: int

    @classmethod
    def load(cls) -> "Config":
        project_root = Path(__file__).parent.parent.parent
        data_dir = Path(os.getenv("GYAAN_DATA_DIR", str(project_root / "data")))
        documents = os.getenv("GYAAN_DOCUMENTS_PATH", str(data_dir / "documents.json")).strip()
        return cls(
            project_root=project_root,
            data_dir=data_dir,
            logs_dir=Path(os.getenv("GYAAN_LOGS_DIR", str(project_root / "logs"))),
            documents_path=Path(documents) if documents else None,
            newsapi_key=os.getenv("NEWSAPI_KEY", ""),
            google_search_api_key=os.getenv("GOOGLE_SEARCH_API_KEY", ""),
            google_search_engine_id=os.getenv("GOOGLE_SEARCH_ENGINE_ID", ""),
            unsplash_access_key=os.getenv("UNSPLASH_ACCESS_KEY", ""),
            newsapi_url=os.getenv("NEWSAPI_URL", "https://newsapi.org/v2"),
            google_search_url=os.getenv("GOOGLE_SEARCH_URL", "https://www.googleapis.com/customsearch/v1"),
            duckduckgo_url=os.getenv("DUCKDUCKGO_URL", "https://api.duckduckgo.com/"),
            unsplash_url=os.getenv("UNSPLASH_URL", "https://api.unsplash.com"),
            request_timeout_seconds=float(os.getenv("SEARCH_TIMEOUT_SECONDS", "10")),
            max_query_length=int(os.getenv("SEARCH_MAX_QUERY_LENGTH", "1000")),
            news_page_size=int(os.getenv("NEWS_PAGE_SIZE", "20")),
            web_page_size=int(os.getenv("WEB_PAGE_SIZE", "10")),
            image_page_size=int(os.getenv("IMAGE_PAGE_SIZE", "20")),
            news_language=os.getenv("NEWS_LANGUAGE", "en"),
            news_country=os.getenv("NEWS_COUNTRY", "us"),
            image_orientation=os.getenv("IMAGE_ORIENTATION", "landscape"),
            http_host=os.getenv("GYAAN_HTTP_HOST", "0.0.0.0"),
            http_port=int(os.getenv("GYAAN_HTTP_PORT", "8000")),
        )

    def integrations(self) -> dict[str, bool]:
        """Which upstream integrations have credentials. DuckDuckGo is keyless."""
        return {
            "newsapi": bool(self.newsapi_key.strip()),
            "google_search": bool(self.google_search_api_key.strip() and self.google_search_engine_id.strip()),
            "duckduckgo": True,
            "unsplash": bool(self.unsplash_access_key.strip()),
        }

    def validate(self) -> list[str]:
        errors = []
        if self.request_timeout_seconds <= 0:
            errors.append(f"SEARCH_TIMEOUT_SECONDS must be positive, got {self.request_timeout_seconds}")
        if self.max_query_length < 1:
            errors.append(f"SEARCH_MAX_QUERY_LENGTH must be at least 1, got {self.max_query_length}")
        available = self.integrations()
        if not available["newsapi"]:
            errors.append("NEWSAPI_KEY is not set: news and trending modes are unavailable")
        if not available["google_search"]:
            errors.append("GOOGLE_SEARCH_API_KEY/GOOGLE_SEARCH_ENGINE_ID not set: web mode falls back to DuckDuckGo")
        if not available["unsplash"]:
            errors.append("UNSPLASH_ACCESS_KEY is not set: images mode is unavailable")
        return errors


config = Config.load()
