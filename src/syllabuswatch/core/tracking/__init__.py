"""Snapshot storage and change detection."""

from .detector import ChangeDetector, ChangeReport, DEFAULT_STORAGE_KEY
from .locks import CourseLockRegistry
from .store import JsonFileStore, KeyValueStore, MemoryStore, Snapshot, StorageError

__all__ = [
    "ChangeDetector",
    "ChangeReport",
    "DEFAULT_STORAGE_KEY",
    "CourseLockRegistry",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "Snapshot",
    "StorageError",
]
