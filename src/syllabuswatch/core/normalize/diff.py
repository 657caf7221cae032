"""
Fingerprinting and diff computation for change tracking.

Provides utilities to detect and describe changes between two deadline
lists of the same course.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Iterable

from .canonical import Deadline


def compute_snapshot_hash(deadlines: Iterable[Deadline]) -> str:
    """Compute an order-independent fingerprint of a deadline list.

    Only type, title and due date take part; confidence, raw text and
    timestamps do not.

    Returns:
        32-character hex fingerprint
    """
    content_string = "|".join(sorted(d.hash_part for d in deadlines))
    return hashlib.sha256(content_string.encode("utf-8")).hexdigest()[:32]


@dataclass
class DeadlineChange:
    """A deadline matched across snapshots whose due date moved."""

    old: Deadline
    new: Deadline

    def to_dict(self) -> dict[str, Any]:
        return {"old": self.old.to_dict(), "new": self.new.to_dict()}


@dataclass
class DiffResult:
    """Added, removed and modified deadlines between two lists."""

    added: list[Deadline] = field(default_factory=list)
    removed: list[Deadline] = field(default_factory=list)
    modified: list[DeadlineChange] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """Check if there are any changes."""
        return bool(self.added or self.removed or self.modified)


def compare_deadlines(old: Iterable[Deadline], new: Iterable[Deadline]) -> DiffResult:
    """Diff two deadline lists.

    Records are matched by title and type. A record whose due date moved is
    reported as modified; a record whose type changed no longer matches and
    shows up as one removal plus one addition.

    Args:
        old: Deadlines from the previous snapshot
        new: Deadlines from the current scrape

    Returns:
        DiffResult
    """
    # Later records overwrite earlier ones with the same key
    old_map = {d.diff_key: d for d in old}
    new_map = {d.diff_key: d for d in new}

    result = DiffResult()

    for key, deadline in new_map.items():
        if key not in old_map:
            result.added.append(deadline)

    for key, old_deadline in old_map.items():
        new_deadline = new_map.get(key)
        if new_deadline is None:
            result.removed.append(old_deadline)
        elif old_deadline.due_date != new_deadline.due_date:
            result.modified.append(DeadlineChange(old=old_deadline, new=new_deadline))

    return result


def summarize_changes(diff: DiffResult) -> str:
    """Generate a human-readable summary of changes."""
    if not diff.has_changes:
        return "No changes"

    parts = []
    if diff.added:
        parts.append(f"{len(diff.added)} added")
    if diff.removed:
        parts.append(f"{len(diff.removed)} removed")
    if diff.modified:
        parts.append(f"{len(diff.modified)} rescheduled")

    return ", ".join(parts)
