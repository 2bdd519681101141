"""String-keyed storage backends."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Optional, Protocol

from .errors import StorageError


class StoragePort(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """Process-local storage; contents vanish with the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value


class JsonFileStorage:
    """Stores all keys in a single JSON document on disk.

    Every `set` rewrites the document through a temp file and an atomic
    rename, so a crash mid-write leaves the previous document intact.
    """

    def __init__(self, path: str | Path, logger: Optional[logging.Logger] = None):
        self._path = Path(path)
        self._logger = logger or logging.getLogger("storage")
        self._lock = threading.Lock()
        self._items: Optional[dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._load_locked().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            try:
                items = dict(self._load_locked())
            except StorageError as error:
                self._logger.warning("Replacing unreadable storage file: %s", error)
                self._quarantine_locked()
                items = {}
            items[key] = value
            self._write_locked(items)
            self._items = items

    def _load_locked(self) -> dict[str, str]:
        if self._items is not None:
            return self._items

        if not self._path.exists():
            self._items = {}
            return self._items

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as error:
            raise StorageError(f"Failed to read storage file {self._path}: {error}") from error

        if not isinstance(raw, dict) or not all(
            isinstance(key, str) and isinstance(value, str) for key, value in raw.items()
        ):
            raise StorageError(
                f"Storage file {self._path} must contain an object of string values"
            )

        self._items = raw
        return self._items

    def _quarantine_locked(self) -> None:
        corrupt_path = self._path.with_suffix(self._path.suffix + ".corrupt")
        try:
            os.replace(self._path, corrupt_path)
        except OSError as error:
            raise StorageError(
                f"Failed to move unreadable storage file {self._path}: {error}"
            ) from error
        self._logger.warning("Unreadable storage file moved to %s", corrupt_path)

    def _write_locked(self, items: dict[str, str]) -> None:
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(items, indent=2), encoding="utf-8")
            os.replace(temp_path, self._path)
        except OSError as error:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    self._logger.warning("Failed to remove temp file %s", temp_path)
            raise StorageError(f"Failed to write storage file {self._path}: {error}") from error
