"""Opaque key/value document store: named collections of JSON documents in one file."""

import json
import os
import threading
import uuid
from pathlib import Path
from typing import Any

from src.core.logger import logger

Document = dict[str, Any]


class DocumentStore:
    """Thread-safe collection store. Persists to ``path`` after each write; memory-only when ``path`` is None."""

    def __init__(self, path: Path | None = None):
        self._path = path
        self._lock = threading.Lock()
        self._collections: dict[str, dict[str, Document]] = self._load()

    def _load(self) -> dict[str, dict[str, Document]]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not read document store {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {
            name: docs for name, docs in data.items() if isinstance(docs, dict)
        }

    def _flush(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._collections, f, indent=2, default=str)
        os.replace(tmp, self._path)

    def get(self, collection: str, key: str) -> Document | None:
        with self._lock:
            doc = self._collections.get(collection, {}).get(key)
            return dict(doc) if doc is not None else None

    def set(self, collection: str, key: str, data: Document, merge: bool = False) -> Document:
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            current = docs.get(key) if merge else None
            stored = {**current, **data} if current else dict(data)
            docs[key] = stored
            self._flush()
            return dict(stored)

    def add(self, collection: str, data: Document) -> str:
        key = uuid.uuid4().hex
        with self._lock:
            self._collections.setdefault(collection, {})[key] = dict(data)
            self._flush()
        return key

    def find(self, collection: str, field: str, value: Any) -> list[tuple[str, Document]]:
        with self._lock:
            return [
                (key, dict(doc))
                for key, doc in self._collections.get(collection, {}).items()
                if doc.get(field) == value
            ]

    def delete(self, collection: str, key: str) -> bool:
        with self._lock:
            docs = self._collections.get(collection, {})
            if key not in docs:
                return False
            del docs[key]
            self._flush()
            return True
