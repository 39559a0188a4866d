"""HTTP surface: aggregated search, preferences, search history and health."""

from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import Body, FastAPI, Header, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from src.core.config import Config, config as default_config
from src.core.logger import logger
from src.search.aggregator import SearchAggregator
from src.search.errors import SearchServiceError, UnauthorizedError
from src.search.models import ErrorResponse, SearchRequest, SearchResponse
from src.search.normalize import now_iso
from src.store import DocumentStore, HistoryFilters, PreferencesRepository, SearchHistoryRepository

VERSION = "1.0.0"
USER_HEADER = "X-User-Email"
NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, must-revalidate",
    "CDN-Cache-Control": "no-store, must-revalidate",
}
_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


def _require_user(user: str | None) -> str:
    if not user or not user.strip():
        raise UnauthorizedError()
    return user.strip()


def create_app(
    cfg: Config | None = None,
    aggregator: SearchAggregator | None = None,
    store: DocumentStore | None = None,
) -> FastAPI:
    cfg = cfg or default_config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client: httpx.AsyncClient | None = None
        if getattr(app.state, "aggregator", None) is None:
            client = httpx.AsyncClient(headers={"User-Agent": f"GyaanSearch/{VERSION}"})
            app.state.aggregator = SearchAggregator.from_config(cfg, client)
        for warning in cfg.validate():
            logger.warning(warning)
        try:
            yield
        finally:
            if client is not None:
                await client.aclose()

    app = FastAPI(title="Gyaan Search", version=VERSION, lifespan=lifespan)
    app.state.aggregator = aggregator
    documents = store or DocumentStore(cfg.documents_path)
    app.state.preferences = PreferencesRepository(documents)
    app.state.history = SearchHistoryRepository(documents)

    @app.middleware("http")
    async def disable_caching(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(NO_CACHE_HEADERS)
        return response

    @app.exception_handler(SearchServiceError)
    async def handle_service_error(_: Request, exc: SearchServiceError) -> JSONResponse:
        return JSONResponse(exc.to_payload(), status_code=exc.status_code)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "version": VERSION,
            "timestamp": now_iso(),
            "integrations": cfg.integrations(),
        }

    @app.get("/api/search", responses=_ERROR_RESPONSES)
    async def search(
        request: Request,
        q: str | None = None,
        query: str | None = None,
        mode: str | None = None,
        user: str | None = Header(default=None, alias=USER_HEADER),
    ) -> JSONResponse:
        search_request = SearchRequest.parse(q if q is not None else query, mode, cfg.max_query_length)
        try:
            results = await request.app.state.aggregator.search(search_request)
        except SearchServiceError:
            raise
        except Exception as e:
            logger.exception(f"Search failed for mode={search_request.mode.value}")
            raise SearchServiceError() from e

        if user and user.strip():
            await run_in_threadpool(
                request.app.state.history.save,
                user.strip(),
                search_request.query,
                results=len(results),
                filters=HistoryFilters(source=search_request.mode.value),
            )
        return JSONResponse(SearchResponse(results=results).to_wire())

    @app.get("/api/preferences")
    def get_preferences(
        request: Request,
        user: str | None = Header(default=None, alias=USER_HEADER),
    ) -> dict[str, Any]:
        return request.app.state.preferences.get(_require_user(user))

    @app.post("/api/preferences")
    def save_preferences(
        request: Request,
        body: dict[str, Any] = Body(...),
        user: str | None = Header(default=None, alias=USER_HEADER),
    ) -> dict[str, Any]:
        request.app.state.preferences.save(_require_user(user), body)
        return {"ok": True}

    @app.get("/api/history")
    def list_history(
        request: Request,
        limit: int = 10,
        user: str | None = Header(default=None, alias=USER_HEADER),
    ) -> dict[str, Any]:
        entries = request.app.state.history.recent(_require_user(user), limit=limit)
        return {"history": [e.to_wire() for e in entries]}

    @app.delete("/api/history")
    def clear_history(
        request: Request,
        user: str | None = Header(default=None, alias=USER_HEADER),
    ) -> dict[str, Any]:
        removed = request.app.state.history.clear(_require_user(user))
        return {"ok": True, "removed": removed}

    @app.get("/api/history/{entry_id}")
    def get_history_item(
        request: Request,
        entry_id: str,
        user: str | None = Header(default=None, alias=USER_HEADER),
    ) -> JSONResponse:
        owner = _require_user(user)
        entry = request.app.state.history.get(entry_id)
        if entry is None or entry.user_id != owner:
            return JSONResponse({"error": "Not found"}, status_code=404)
        return JSONResponse(entry.to_wire())

    @app.delete("/api/history/{entry_id}")
    def delete_history_item(
        request: Request,
        entry_id: str,
        user: str | None = Header(default=None, alias=USER_HEADER),
    ) -> JSONResponse:
        owner = _require_user(user)
        history: SearchHistoryRepository = request.app.state.history
        entry = history.get(entry_id)
        if entry is None or entry.user_id != owner:
            return JSONResponse({"error": "Not found"}, status_code=404)
        history.delete(entry_id)
        return JSONResponse({"ok": True})

    return app
