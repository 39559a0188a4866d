"""Structured logging: console lines plus a JSONL event file for search requests."""

import contextvars
import json
import logging
import os
import sys
import threading
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from src.core.config import config


def _format_duration(seconds: float) -> str:
    if seconds < 0:
        return "0s"
    if seconds >= 60:
        m = int(seconds // 60)
        s = seconds % 60
        if s < 0.05:
            return f"{m}m"
        return f"{m}m {s:.0f}s" if s >= 1 else f"{m}m {s:.1f}s"
    if seconds >= 0.05:
        return f"{seconds:.1f}s"
    if seconds > 0:
        return "<0.1s"
    return "0s"


def _short_reason(reason: str | None, max_len: int = 80) -> str:
    """One-line short reason for console (failed provider)."""
    if not reason or not reason.strip():
        return ""
    s = reason.strip().replace("\n", " ").strip()
    return s[:max_len] + "..." if len(s) > max_len else s


_request_ctx: contextvars.ContextVar[tuple[str, str, float] | None] = contextvars.ContextVar(
    "search_request", default=None
)
_provider_start: contextvars.ContextVar[float | None] = contextvars.ContextVar(
    "provider_start", default=None
)


def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return sys.stdout.isatty()
    except Exception:
        return False


def _c(role: str) -> str:
    if not _use_color():
        return ""
    # 38;5;N = foreground 256-color
    codes = {
        "dim": "\033[38;5;239m",
        "provider": "\033[38;5;81m",
        "ok": "\033[38;5;78m",
        "fail": "\033[38;5;203m",
        "duration": "\033[38;5;221m",
        "mode": "\033[38;5;245m",
    }
    return codes.get(role, "")


def _reset() -> str:
    if not _use_color():
        return ""
    return "\033[0m"


@dataclass
class LogEvent:
    event_type: str
    timestamp: str
    data: dict[str, Any]

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class SearchLogger:
    def __init__(self):
        config.logs_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = config.logs_dir / "search.log"
        self._file_lock = threading.Lock()
        self._log_file_handle = open(self.log_file, "a", encoding="utf-8")
        self._setup_console_logger()

    def _setup_console_logger(self):
        self.console = logging.getLogger("gyaan")
        self.console.setLevel(logging.DEBUG)
        self._console_formatter = logging.Formatter(
            "%(asctime)s │ %(message)s", datefmt="%H:%M:%S"
        )
        if not self.console.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.INFO)
            handler.setFormatter(self._console_formatter)
            self.console.addHandler(handler)

    def log_event(self, event: LogEvent) -> None:
        ctx = _request_ctx.get()
        if ctx is not None:
            event.data.setdefault("request_id", ctx[0])
        with self._file_lock:
            self._log_file_handle.write(event.to_json() + "\n")
            self._log_file_handle.flush()

    def _timestamp(self) -> str:
        return datetime.now().isoformat()

    def _prefix(self) -> str:
        return "  │ " if _request_ctx.get() is not None else ""

    def request_received(self, request_id: str, mode: str, query: str) -> None:
        _request_ctx.set((request_id, mode, time.monotonic()))
        event = LogEvent(
            event_type="SEARCH_REQUEST",
            timestamp=self._timestamp(),
            data={"request_id": request_id, "mode": mode, "query": query[:200]},
        )
        self.log_event(event)
        self.console.info(
            f"Search {_c('mode')}[{mode}]{_reset()}: {query[:100]}{'...' if len(query) > 100 else ''}"
        )

    def provider_call(self, provider: str, endpoint: str) -> None:
        _provider_start.set(time.monotonic())
        event = LogEvent(
            event_type="PROVIDER_CALL",
            timestamp=self._timestamp(),
            data={"provider": provider, "endpoint": endpoint},
        )
        self.log_event(event)
        self.console.debug(f"{self._prefix()}▶ {provider}  {endpoint}")

    def _provider_elapsed(self) -> float:
        start = _provider_start.get()
        _provider_start.set(None)
        return (time.monotonic() - start) if start is not None else 0.0

    def provider_result(self, provider: str, result_count: int) -> None:
        elapsed = self._provider_elapsed()
        event = LogEvent(
            event_type="PROVIDER_RESULT",
            timestamp=self._timestamp(),
            data={
                "provider": provider,
                "result_count": result_count,
                "duration_seconds": round(elapsed, 3),
            },
        )
        self.log_event(event)
        dur = f"{_c('duration')}{_format_duration(elapsed)}{_reset()}"
        self.console.info(
            f"{self._prefix()}{_c('provider')}{provider}{_reset()}  {result_count} results  in {dur}"
        )

    def provider_failed(self, provider: str, reason: str) -> None:
        elapsed = self._provider_elapsed()
        event = LogEvent(
            event_type="PROVIDER_FAILED",
            timestamp=self._timestamp(),
            data={
                "provider": provider,
                "error_reason": reason[:500],
                "duration_seconds": round(elapsed, 3),
            },
        )
        self.log_event(event)
        self.console.warning(
            f"{self._prefix()}{_c('provider')}{provider}{_reset()}  "
            f"{_c('fail')}[failed]{_reset()} {_short_reason(reason)}"
        )

    def provider_skipped(self, provider: str) -> None:
        event = LogEvent(
            event_type="PROVIDER_SKIPPED",
            timestamp=self._timestamp(),
            data={"provider": provider, "reason": "not configured"},
        )
        self.log_event(event)
        self.console.debug(f"{self._prefix()}{provider} skipped (not configured)")

    def request_completed(self, provider: str | None, result_count: int, success: bool = True) -> None:
        ctx = _request_ctx.get()
        _request_ctx.set(None)
        elapsed = (time.monotonic() - ctx[2]) if ctx is not None else 0.0
        event = LogEvent(
            event_type="SEARCH_RESULT",
            timestamp=self._timestamp(),
            data={
                "request_id": ctx[0] if ctx else None,
                "mode": ctx[1] if ctx else None,
                "provider": provider,
                "result_count": result_count,
                "success": success,
                "duration_seconds": round(elapsed, 3),
            },
        )
        self.log_event(event)
        dur = f"{_c('duration')}{_format_duration(elapsed)}{_reset()}"
        status = f"{_c('ok')}[ok]{_reset()}" if success else f"{_c('fail')}[failed]{_reset()}"
        self.console.info(
            f"  ✓ Done  {provider or '-'}  {result_count} results  total {dur}  {status}"
        )

    def error(self, message: str, *args, exception: Exception | None = None, **kwargs):
        event = LogEvent(
            event_type="ERROR",
            timestamp=self._timestamp(),
            data={
                "message": message,
                "exception": str(exception) if exception else None,
            },
        )
        self.log_event(event)

        # Filter kwargs for standard logger
        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        if exception and "exc_info" not in log_kwargs:
            log_kwargs["exc_info"] = exception

        self.console.error(f"❌ Error: {message}", *args, **log_kwargs)

    def info(self, message: str, *args, **kwargs):
        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.info(message, *args, **log_kwargs)

    def warning(self, message: str, *args, **kwargs):
        event = LogEvent(
            event_type="WARNING",
            timestamp=self._timestamp(),
            data={"message": message[:500]},
        )
        self.log_event(event)

        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.warning(f"⚠️ {message}", *args, **log_kwargs)

    def exception(self, message: str, *args, **kwargs):
        event = LogEvent(
            event_type="ERROR",
            timestamp=self._timestamp(),
            data={"message": message[:500]},
        )
        self.log_event(event)
        self.console.exception(f"❌ {message}", *args, **kwargs)

    def debug(self, message: str, *args, **kwargs):
        event = LogEvent(
            event_type="DEBUG", timestamp=self._timestamp(), data={"message": message}
        )
        self.log_event(event)

        allowed = {"exc_info", "stack_info", "stacklevel", "extra"}
        log_kwargs = {k: v for k, v in kwargs.items() if k in allowed}
        self.console.debug(message, *args, **log_kwargs)


logger = SearchLogger()
