"""
Key-Value Store Implementations

- InMemoryKeyValueStore: process-local dict, for tests and throwaway sessions
- FileKeyValueStore: one file per key under a directory
"""

import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Optional

import structlog

from spendquest.services.storage.interface import (
    KeyValueStore,
    StorageError,
    StorageWriteError,
)


logger = structlog.get_logger("spendquest.storage")

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Values are copied in and out."""

    def __init__(self, initial: Optional[dict[str, bytes]] = None):
        self._data: dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def load(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def save(self, key: str, data: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(data)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


class FileKeyValueStore(KeyValueStore):
    """
    Stores each key as `<directory>/<key>.json`.

    Writes go to a temporary file that is then renamed over the target,
    so a crash mid-write leaves the previous value intact.
    """

    def __init__(self, directory: Path):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def load(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Could not read {path}: {e}") from e

    def save(self, key: str, data: bytes) -> None:
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as tmp:
                    tmp.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageWriteError(f"Could not write {path}: {e}") from e

        logger.debug("store_saved", key=key, path=str(path), size=len(data))
