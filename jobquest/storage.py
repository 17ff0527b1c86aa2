"""Persisted client state (auth token, saved-job cache) in a JSON file with file locking."""
from __future__ import annotations

import fcntl
import json
from pathlib import Path
from typing import Any

from jobquest.config import DATA_DIR
from jobquest.log import get_logger

log = get_logger(__name__)

LOCAL_STORE_PATH: Path = DATA_DIR / "local_storage.json"


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class LocalStore:
    """Small key/value store standing in for the browser's localStorage.

    Values are JSON-serializable. A corrupt or missing file reads as empty.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or LOCAL_STORE_PATH

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            _lock(f, exclusive=False)
            try:
                raw = f.read()
            finally:
                _unlock(f)
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            log.warning("Local store %s is corrupt (%s); starting empty", self.path.name, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            _lock(f)
            try:
                json.dump(data, f, indent=2)
            finally:
                _unlock(f)

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)
        log.debug("Stored %s", key)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
            log.debug("Removed %s", key)
