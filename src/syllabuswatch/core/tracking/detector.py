"""
Snapshot-based change detection for course deadlines.

Compares the current deadline list of a course against the last stored
snapshot and keeps the snapshot store up to date.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from syllabuswatch.core.logging import get_contextual_logger
from syllabuswatch.core.normalize.canonical import Deadline
from syllabuswatch.core.normalize.diff import (
    DeadlineChange,
    DiffResult,
    compare_deadlines,
    compute_snapshot_hash,
    summarize_changes,
)
from .locks import CourseLockRegistry
from .store import KeyValueStore, Snapshot, StorageError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "deadlineSnapshots"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ChangeReport:
    """Outcome of one ``detect_changes`` call."""

    has_changes: bool
    is_first_scrape: bool = False
    added: list[Deadline] = field(default_factory=list)
    removed: list[Deadline] = field(default_factory=list)
    modified: list[DeadlineChange] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def summary(self) -> str:
        if self.error:
            return f"Change detection failed: {self.error}"
        if self.is_first_scrape:
            return f"First scrape: {len(self.added)} deadline(s)"
        return summarize_changes(
            DiffResult(added=self.added, removed=self.removed, modified=self.modified)
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-shaped report shared with other tools."""
        if self.error is not None:
            return {"hasChanges": False, "error": self.error}
        return {
            "hasChanges": self.has_changes,
            "isFirstScrape": self.is_first_scrape,
            "added": [d.to_dict() for d in self.added],
            "removed": [d.to_dict() for d in self.removed],
            "modified": [c.to_dict() for c in self.modified],
        }


class ChangeDetector:
    """Tracks per-course deadline snapshots in a key-value store.

    All snapshots live under one key as a ``{course_id: snapshot}`` map.
    Calls for the same course are serialized; storage failures are logged
    and reported on the result instead of raised.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] = _utc_now,
        locks: CourseLockRegistry | None = None,
    ) -> None:
        """Initialize the detector.

        Args:
            store: Storage capability with get/set
            storage_key: Key holding the snapshot map
            clock: Source of snapshot timestamps
            locks: Per-course lock registry (a private one if None)
        """
        self.store = store
        self.storage_key = storage_key
        self.clock = clock
        self.locks = locks or CourseLockRegistry()
        # Guards the read-modify-write of the shared snapshot map
        self._map_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Change detection
    # -------------------------------------------------------------------------

    def detect_changes(self, course_id: str, current: Iterable[Deadline]) -> ChangeReport:
        """Compare current deadlines with the stored snapshot of a course.

        Args:
            course_id: Course identifier
            current: Normalized deadlines from the latest scrape

        Returns:
            ChangeReport; ``error`` is set when storage failed
        """
        current_deadlines = list(current)
        log = get_contextual_logger("tracking", course=course_id)

        with self.locks.hold(course_id):
            try:
                return self._detect(course_id, current_deadlines, log)
            except StorageError as e:
                log.exception(f"Error detecting changes: {e}")
                return ChangeReport(has_changes=False, error=str(e))

    def _detect(self, course_id: str, current: list[Deadline], log: logging.LoggerAdapter) -> ChangeReport:
        previous = self._load_snapshot(course_id)
        current_hash = compute_snapshot_hash(current)

        if previous is None:
            self._save_snapshot(course_id, current, current_hash)
            log.info(f"First scrape: stored {len(current)} deadline(s)")
            return ChangeReport(
                has_changes=True,
                is_first_scrape=True,
                added=list(current),
            )

        if previous.hash == current_hash:
            log.debug("Snapshot unchanged")
            return ChangeReport(has_changes=False, is_first_scrape=False)

        diff = compare_deadlines(previous.deadlines, current)
        self._save_snapshot(course_id, current, current_hash)

        log.info(f"Deadlines changed: {summarize_changes(diff)}")
        return ChangeReport(
            has_changes=True,
            is_first_scrape=False,
            added=diff.added,
            removed=diff.removed,
            modified=diff.modified,
        )

    # -------------------------------------------------------------------------
    # Snapshot store
    # -------------------------------------------------------------------------

    def _read_map(self) -> dict[str, Any]:
        try:
            data = self.store.get(self.storage_key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Storage read failed: {e}", key=self.storage_key) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StorageError(
                f"Expected a mapping under '{self.storage_key}', got {type(data).__name__}",
                key=self.storage_key,
            )
        return data

    def _write_map(self, snapshots: dict[str, Any]) -> None:
        try:
            self.store.set(self.storage_key, snapshots)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Storage write failed: {e}", key=self.storage_key) from e

    def _load_snapshot(self, course_id: str) -> Snapshot | None:
        raw = self._read_map().get(course_id)
        if raw is None:
            return None
        if not isinstance(raw, dict):
            raise StorageError(f"Malformed snapshot for course {course_id}", key=self.storage_key)
        return Snapshot.from_dict(raw)

    def _save_snapshot(self, course_id: str, deadlines: list[Deadline], snapshot_hash: str) -> None:
        snapshot = Snapshot(
            deadlines=list(deadlines),
            hash=snapshot_hash,
            timestamp=int(self.clock().timestamp() * 1000),
        )
        with self._map_lock:
            snapshots = self._read_map()
            snapshots[course_id] = snapshot.to_dict()
            self._write_map(snapshots)
        logger.debug(f"Saved snapshot for course {course_id}", extra={"course": course_id})

    def get_snapshot(self, course_id: str) -> Snapshot | None:
        """Stored snapshot of a course, or None if missing or unreadable."""
        try:
            return self._load_snapshot(course_id)
        except StorageError as e:
            logger.error(f"Cannot read snapshot: {e}", extra={"course": course_id})
            return None

    def list_courses(self) -> list[str]:
        """Course ids that have a stored snapshot."""
        try:
            return sorted(self._read_map())
        except StorageError as e:
            logger.error(f"Cannot list snapshots: {e}")
            return []

    def clear_snapshot(self, course_id: str) -> bool:
        """Delete a course snapshot. Returns True if one was removed."""
        with self.locks.hold(course_id), self._map_lock:
            try:
                snapshots = self._read_map()
                if course_id not in snapshots:
                    return False
                del snapshots[course_id]
                self._write_map(snapshots)
            except StorageError as e:
                logger.error(f"Cannot clear snapshot: {e}", extra={"course": course_id})
                return False

        logger.info(f"Cleared snapshot for course {course_id}", extra={"course": course_id})
        return True
