"""
Deadline pipeline orchestrator.

Coordinates the full workflow: text → candidates → deadlines → change report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from syllabuswatch.core.config.models import AppConfig, StorageBackend, StorageConfig
from syllabuswatch.core.extract.pipeline import CandidateExtractor
from syllabuswatch.core.normalize.canonical import Deadline, process_deadlines
from syllabuswatch.core.tracking.detector import ChangeDetector, ChangeReport
from syllabuswatch.core.tracking.store import JsonFileStore, KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)


@dataclass
class RunStats:
    """Statistics for one pipeline run."""

    candidates_found: int = 0
    deadlines_kept: int = 0
    matcher_hits: dict[str, int] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def candidates_dropped(self) -> int:
        """Candidates lost to missing dates or (title, date) duplicates."""
        return self.candidates_found - self.deadlines_kept

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "candidates_found": self.candidates_found,
            "deadlines_kept": self.deadlines_kept,
            "candidates_dropped": self.candidates_dropped,
            "matcher_hits": dict(self.matcher_hits),
            "warnings": list(self.warnings),
        }


def open_store(config: StorageConfig) -> KeyValueStore:
    """Build the snapshot store selected in configuration."""
    if config.backend == StorageBackend.MEMORY:
        return MemoryStore()
    if config.backend == StorageBackend.SQL:
        # Imported lazily so the core pipeline does not need SQLAlchemy loaded
        from syllabuswatch.persistence.repo import SqlStore
        return SqlStore.from_url(config.database_url, echo=config.echo)
    return JsonFileStore(config.path)


class DeadlineRunner:
    """Runs extraction and normalization, and optionally change tracking.

    The extraction half is pure; only ``track`` touches the store.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        store: KeyValueStore | None = None,
        extractor: CandidateExtractor | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Application configuration (defaults if None)
            store: Snapshot store (built from config on first use if None)
            extractor: Candidate extractor (built from config if None)
        """
        self.config = config or AppConfig()
        self.extractor = extractor or CandidateExtractor(
            detect_html=self.config.extraction.detect_html,
        )
        self._store = store
        self._detector: ChangeDetector | None = None
        self.last_stats: RunStats | None = None

    @property
    def detector(self) -> ChangeDetector:
        if self._detector is None:
            if self._store is None:
                self._store = open_store(self.config.storage)
            self._detector = ChangeDetector(
                self._store,
                storage_key=self.config.storage.storage_key,
            )
        return self._detector

    def extract(self, text: str, *, now: date | datetime) -> list[Deadline]:
        """Turn document text into sorted, deduplicated deadlines.

        Args:
            text: Document text (plain or HTML fragment)
            now: Resolution time for year inference

        Returns:
            Deadlines in due-date order
        """
        result = self.extractor.extract(text)
        deadlines = process_deadlines(
            result.candidates,
            now=now,
            date_fallback=self.config.extraction.date_fallback,
        )

        self.last_stats = RunStats(
            candidates_found=result.candidate_count,
            deadlines_kept=len(deadlines),
            matcher_hits=dict(result.matcher_hits),
            warnings=list(result.warnings),
        )
        logger.info(
            f"Found {len(deadlines)} deadline(s) from {result.candidate_count} candidate(s)",
            extra={"candidates": result.candidate_count, "deadlines": len(deadlines)},
        )
        return deadlines

    def track(self, course_id: str, text: str, *, now: date | datetime) -> tuple[list[Deadline], ChangeReport]:
        """Extract deadlines for a course and diff them against its snapshot."""
        deadlines = self.extract(text, now=now)
        report = self.detector.detect_changes(course_id, deadlines)
        return deadlines, report


def run_pipeline(text: str, *, now: date | datetime, config: AppConfig | None = None) -> list[Deadline]:
    """One-shot extraction without change tracking."""
    return DeadlineRunner(config).extract(text, now=now)
