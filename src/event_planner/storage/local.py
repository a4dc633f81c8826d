"""On-device key/value storage.

Two scopes, matching the browser storage the web client relies on:

- **session**: `MemoryStorage`, lives as long as the process
- **persistent**: `FileStorage`, a JSON object file on disk

Keys and values are plain strings; structured values are JSON-encoded by
the caller.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

PERSISTENT_STORAGE_FILENAME = "local_storage.json"


class StorageError(Exception):
    """Raised when on-device storage cannot be read or written."""

    pass


class KeyValueStorage(ABC):
    """String key/value store."""

    scope: str

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the value stored under `key`, or None."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove `key` if present."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""
        pass


class MemoryStorage(KeyValueStorage):
    """Session-scoped storage held in memory."""

    scope = "session"

    def __init__(self, items: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()


class FileStorage(KeyValueStorage):
    """Persistent storage backed by a JSON file.

    The whole file is read on every access and rewritten atomically on every
    change, so separate processes observe each other's writes.

    Args:
        directory: Directory holding the storage file (created on first write)
        filename: Storage file name
    """

    scope = "persistent"

    def __init__(
        self,
        directory: Path | str,
        filename: str = PERSISTENT_STORAGE_FILENAME,
    ):
        self.path = Path(directory) / filename

    def _read(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt storage file {self.path}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Corrupt storage file {self.path}")
        return data

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            Path(tmp_path).unlink(missing_ok=True)
            raise StorageError(f"Cannot write {self.path}: {e}") from e

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        self._write({})
