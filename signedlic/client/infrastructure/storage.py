"""
Infrastructure layer: Key-value stores for the signed license bytes.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
import tempfile
import threading
from pathlib import Path  # noqa: TC003
from typing import cast

logger = logging.getLogger(__name__)


class FileKeyValueStore:
    """Bytes values kept base64-encoded in one JSON file.

    Writes go to a temporary file that replaces the store in one step, so a
    reader sees either the old document or the new one.
    """

    def __init__(self, file_path: Path):
        self.file_path = file_path
        self._lock = threading.Lock()

    def _load(self) -> dict[str, str]:
        try:
            with self.file_path.open() as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring unreadable license store %s", self.file_path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed license store %s", self.file_path)
            return {}
        return cast("dict[str, str]", data)

    def _save(self, data: dict[str, str]) -> None:
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.file_path.parent, prefix=f".{self.file_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> bytes | None:
        with self._lock:
            value = self._load().get(key)
        if not isinstance(value, str):
            return None
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error:
            logger.warning("Ignoring corrupt value for %r in %s", key, self.file_path)
            return None

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            data = self._load()
            data[key] = base64.b64encode(value).decode("ascii")
            self._save(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if data.pop(key, None) is not None:
                self._save(data)


class MemoryKeyValueStore:
    """In-process store, used for tests and embedding."""

    def __init__(self, initial: dict[str, bytes] | None = None):
        self._data: dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)
