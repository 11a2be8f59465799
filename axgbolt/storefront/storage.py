"""Synchronous key-value storage for client-side state.

Stands in for the browser's persistent storage: string keys mapped to
string values, usually JSON. ``MemoryStorage`` keeps everything in the
process, ``JsonFileStorage`` persists to one JSON document on disk.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger()


class StorageError(Exception):
    """Raised when a value cannot be written to storage."""


class KeyValueStorage(Protocol):
    """Minimal storage interface the storefront components depend on."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage.

    ``max_bytes`` caps the total size of stored values, mimicking a
    storage quota.
    """

    def __init__(self, max_bytes: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self.max_bytes = max_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.max_bytes is not None:
            used = sum(len(v) for k, v in self._items.items() if k != key)
            if used + len(value) > self.max_bytes:
                raise StorageError(f"Storage quota exceeded writing {key}")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileStorage:
    """Storage persisted as a single JSON object in a file.

    Every write rewrites the whole file through a temporary file and an
    atomic rename. Concurrent writers from other processes are not merged:
    the last write wins.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get_item(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._dump(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if items.pop(key, None) is not None:
            self._dump(items)

    def keys(self) -> list[str]:
        return list(self._load())

    def _load(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Storage file unreadable", path=str(self.path), error=str(e))
            return {}

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Storage file corrupted, starting empty", path=str(self.path))
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, items: dict[str, str]) -> None:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-")
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(items, tmp)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot write storage file {self.path}: {e}") from e
