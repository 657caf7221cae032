"""
Snapshot model and key-value storage capabilities.

The change detector only needs ``get``/``set`` on a single key; any object
with those two methods can back it.
"""

from __future__ import annotations

import copy
import os
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import orjson

from syllabuswatch.core.normalize.canonical import Deadline


class StorageError(Exception):
    """Snapshot storage could not be read or written."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal storage capability consumed by the change detector.

    Implementations raise on failure; ``get`` returns None for a missing key.
    """

    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


@dataclass
class Snapshot:
    """Last known deadline list of one course."""

    deadlines: list[Deadline] = field(default_factory=list)
    hash: str = ""
    timestamp: int = 0  # epoch milliseconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "deadlines": [d.to_dict() for d in self.deadlines],
            "hash": self.hash,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Snapshot":
        """Rebuild a snapshot from stored data.

        Raises:
            StorageError: If the stored data is malformed
        """
        try:
            return cls(
                deadlines=[Deadline.from_dict(item) for item in data.get("deadlines") or []],
                hash=str(data["hash"]),
                timestamp=int(data.get("timestamp") or 0),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed snapshot data: {e}") from e


# =============================================================================
# In-memory Store
# =============================================================================


class MemoryStore:
    """Process-local store; values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()
        self.writes = 0

    def get(self, key: str) -> Any | None:
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)
            self.writes += 1


# =============================================================================
# JSON File Store
# =============================================================================


class JsonFileStore:
    """Store every key in one JSON document on disk.

    Writes go to a temporary file that replaces the document, so a failed
    write never leaves a half-written file behind.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = orjson.loads(self.path.read_bytes())
        except orjson.JSONDecodeError as e:
            raise StorageError(f"Corrupt snapshot file {self.path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Expected a JSON object in {self.path}")
        return data

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value

            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{self.path.name}.", dir=self.path.parent
                )
                try:
                    with os.fdopen(fd, "wb") as f:
                        f.write(orjson.dumps(data, option=orjson.OPT_INDENT_2))
                    os.replace(tmp_name, self.path)
                except BaseException:
                    os.unlink(tmp_name)
                    raise
            except (OSError, TypeError, ValueError) as e:
                raise StorageError(f"Cannot write {self.path}: {e}", key=key) from e
