"""
Per-course lock management for change detection.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class CourseLockRegistry:
    """Hands out one lock per course id.

    Scrapes of the same course run one at a time; different courses never
    wait on each other.
    """

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, course_id: str) -> threading.Lock:
        """Get (creating if needed) the lock for a course."""
        with self._guard:
            lock = self._locks.get(course_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[course_id] = lock
            return lock

    @contextmanager
    def hold(self, course_id: str) -> Iterator[None]:
        """Hold the course lock for the duration of the block."""
        lock = self.get(course_id)
        with lock:
            yield

    def is_locked(self, course_id: str) -> bool:
        """Check if a scrape of the course is in progress."""
        with self._guard:
            lock = self._locks.get(course_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
