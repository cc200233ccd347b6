"""Key-value stores for behavior logs: in-memory and JSON file with file locking."""
from __future__ import annotations

import fcntl
import json
from pathlib import Path
from typing import Any, Iterator, Protocol

from jobmatch.log import get_logger

log = get_logger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStore:
    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        # round-trip through JSON so stored values match what a file store returns
        self._data[key] = json.loads(json.dumps(value))

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))


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


class JsonFileStore:
    """All keys in one JSON object on disk; reads and writes take a flock."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                _lock(f, exclusive=False)
                try:
                    data = json.load(f)
                finally:
                    _unlock(f)
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("Could not read store %s: %s", self.path.name, exc)
            return {}
        if not isinstance(data, dict):
            log.warning("Store %s does not hold an object, ignoring it", self.path.name)
            return {}
        return data

    def get(self, key: str) -> Any | None:
        return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                _lock(f)
                try:
                    json.dump(data, f, ensure_ascii=False)
                finally:
                    _unlock(f)
        except OSError as exc:
            log.warning("Could not write store %s: %s", self.path.name, exc)
            return
        log.debug("Stored %s → %s", key, self.path.name)

    def keys(self) -> Iterator[str]:
        return iter(list(self._read()))
