# src/station/storage/kv_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _copy(value: Any) -> Any:
    # Values are JSON documents; a round-trip both copies and validates them.
    return json.loads(json.dumps(value, ensure_ascii=False))


class InMemoryStore:
    """Dict-backed key/value store (embedding and tests)."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = _copy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return _copy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = _copy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStore:
    """
    Key/value store persisted as a single JSON object on disk.

    Every set/delete rewrites the file atomically (tmp file + os.replace).
    A missing or corrupt file loads as an empty store; it is never fatal.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._data = self._load()
        logger.info("JsonFileStore ready path=%s keys=%d", self._path, len(self._data))

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except Exception:
            logger.exception("Failed to read state file %s; starting empty.", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("State file %s is not a JSON object; starting empty.", self._path)
            return {}
        return data

    def _flush(self) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            tmp.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
        except Exception:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise
        with contextlib.suppress(Exception):
            os.chmod(self._path, 0o600)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._data:
                return default
            return _copy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = _copy(value)
            self._flush()
        logger.debug("State key saved key=%s", key)

    def delete(self, key: str) -> None:
        with self._lock:
            if key not in self._data:
                return
            del self._data[key]
            self._flush()

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)
