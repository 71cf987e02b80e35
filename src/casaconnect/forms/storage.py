"""Client-durable key-value storage for drafts and snapshots.

`StorageHelper` is the only API the form code uses. It stores JSON values
and never raises: drafts are a convenience, so a full or unavailable backend
degrades to "nothing saved" / "nothing found" and is logged.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

import structlog

logger = structlog.get_logger(__name__)


class StorageUnavailableError(Exception):
    """Raised by a backend that cannot be read or written."""


class StorageQuotaExceededError(StorageUnavailableError):
    """Raised by a backend when a write would exceed its quota."""


class StorageBackend(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryBackend:
    """Process-local backend with an optional quota on stored bytes."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(len(k) + len(v) for k, v in self._items.items() if k != key)
            if used + len(key) + len(value) > self._quota_bytes:
                raise StorageQuotaExceededError(f"Storage quota of {self._quota_bytes} bytes exceeded")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class FileBackend:
    """Backend persisted to a single JSON file, surviving process restarts."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageUnavailableError(str(e)) from e
        try:
            items = json.loads(raw)
        except ValueError as e:
            raise StorageUnavailableError(f"Corrupt storage file {self._path}") from e
        if not isinstance(items, dict):
            raise StorageUnavailableError(f"Corrupt storage file {self._path}")
        return items

    def _write_all(self, items: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f)
            Path(tmp_name).replace(self._path)
        except OSError as e:
            raise StorageUnavailableError(str(e)) from e

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)


class StorageHelper:
    def __init__(self, backend: StorageBackend) -> None:
        self._backend = backend

    def get(self, key: str) -> Any | None:
        """Return the stored value, or None if it is missing or unreadable."""
        try:
            item = self._backend.get_item(key)
            return None if item is None else json.loads(item)
        except (StorageUnavailableError, ValueError) as e:
            logger.warning("storage_read_failed", key=key, error=str(e))
            return None

    def set(self, key: str, value: Any) -> bool:
        try:
            self._backend.set_item(key, json.dumps(value))
        except (StorageUnavailableError, TypeError, ValueError) as e:
            logger.warning("storage_write_failed", key=key, error=str(e))
            return False
        return True

    def remove(self, key: str) -> None:
        try:
            self._backend.remove_item(key)
        except StorageUnavailableError as e:
            logger.warning("storage_remove_failed", key=key, error=str(e))
