# core/storage.py

"""
Durable key → JSON storage used by the record store and the audit trail.

Two backends:
  • MemoryStorage:   process-local dict, used by tests and previews
  • JsonFileStorage: one ``<key>.json`` file per key under a data directory

Writes never raise. They return ``WriteOk`` or ``WriteError`` so callers can
keep the in-memory state authoritative and still observe durability gaps.
"""

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Any, Optional

from core.errors import StorageReadError, WriteOk, WriteResult, extract_storage_error, handle_storage_error
from core.logging_config import logger


class DurableStorage(ABC):
    """Port for synchronous, best-effort keyed storage."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Return the raw stored text for ``key`` or None if absent.
        Raises StorageReadError when the key exists but cannot be read.
        """

    @abstractmethod
    def write(self, key: str, value: str) -> WriteResult:
        """Replace the stored text for ``key``."""

    @abstractmethod
    def remove(self, key: str) -> WriteResult:
        """Delete ``key``. Removing a missing key is not an error."""

    def write_json(self, key: str, data: Any) -> WriteResult:
        """Serialize ``data`` and write it. Serialization errors become WriteError."""
        try:
            payload = json.dumps(data, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            return handle_storage_error(e, key, "Failed to serialize")
        return self.write(key, payload)

    def read_json(self, key: str) -> Optional[Any]:
        """
        Read and parse ``key``.

        Returns None when the key is absent. Raises ValueError when the stored
        text is not valid JSON and StorageReadError when it cannot be read, so
        callers can decide on a fallback.
        """
        raw = self.read(key)
        if raw is None:
            return None
        return json.loads(raw)


class MemoryStorage(DurableStorage):
    """In-memory storage. Thread-safe for concurrent access."""

    def __init__(self):
        self._data: dict[str, str] = {}
        self._lock = Lock()

    def read(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def write(self, key: str, value: str) -> WriteResult:
        with self._lock:
            self._data[key] = value
        return WriteOk(key=key)

    def remove(self, key: str) -> WriteResult:
        with self._lock:
            self._data.pop(key, None)
        return WriteOk(key=key)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


class JsonFileStorage(DurableStorage):
    """
    File-backed storage: each key lives in ``<directory>/<key>.json``.

    Writes go to a temporary sibling first and are moved into place, so a
    crash mid-write leaves the previous document intact.
    """

    def __init__(self, directory: Path):
        self._directory = Path(directory)
        self._lock = Lock()

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            with self._lock:
                if not path.exists():
                    return None
                return path.read_text(encoding="utf-8")
        except OSError as e:
            error = StorageReadError(key, extract_storage_error(e))
            logger.error(str(error))
            raise error from e

    def write(self, key: str, value: str) -> WriteResult:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            with self._lock:
                self._directory.mkdir(parents=True, exist_ok=True)
                tmp_path.write_text(value, encoding="utf-8")
                os.replace(tmp_path, path)
        except OSError as e:
            return handle_storage_error(e, key, "Failed to write")
        return WriteOk(key=key)

    def remove(self, key: str) -> WriteResult:
        try:
            with self._lock:
                self._path(key).unlink(missing_ok=True)
        except OSError as e:
            return handle_storage_error(e, key, "Failed to remove")
        return WriteOk(key=key)


def create_storage(backend: str, data_dir: Optional[str] = None) -> DurableStorage:
    """Build the storage backend named in settings."""
    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        return JsonFileStorage(Path(data_dir or "./data"))
    raise ValueError(f"Unknown storage backend: {backend}")
