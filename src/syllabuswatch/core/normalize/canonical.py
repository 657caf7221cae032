"""
Canonical deadline model for normalized data.

Provides a clean interface between raw candidate strings and the
snapshot store.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Iterable

from syllabuswatch.core.config.models import DeadlineType

from .categorize import ICONS, categorize
from .parsing import normalize_title, parse_deadline_date

# Undated records (when kept) sort by this priority, highest first
TYPE_PRIORITY: dict[DeadlineType, int] = {
    DeadlineType.EXAM: 3,
    DeadlineType.QUIZ: 2,
    DeadlineType.ASSIGNMENT: 1,
}


@dataclass(frozen=True)
class Deadline:
    """One normalized deadline.

    Records are immutable: a changed deadline is a new record, never an
    edited one. Two records describe the same deadline when their title
    and due date match (see ``dedup_key``).
    """

    type: DeadlineType
    title: str
    due_date: date | None
    raw_text: str
    confidence: float
    extracted_at: datetime
    icon: str = ""

    @property
    def dedup_key(self) -> str:
        """Identity used to drop duplicate mentions within one scrape."""
        return f"{self.title}:{_format_date(self.due_date)}"

    @property
    def diff_key(self) -> str:
        """Identity used to match records across two snapshots."""
        return f"{self.title}:{self.type.value}"

    @property
    def hash_part(self) -> str:
        """Canonical triple hashed into a snapshot checksum."""
        return f"{self.type.value}:{self.title}:{_format_date(self.due_date)}"

    def event_id(self, course_code: str) -> str:
        """Stable id calendar exporters use to skip events they already created."""
        return re.sub(r"\s+", "_", f"{course_code}_{self.title}_{_format_date(self.due_date)}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-shaped record shared with other tools."""
        return {
            "type": self.type.value,
            "title": self.title,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "rawText": self.raw_text,
            "icon": self.icon,
            "confidence": self.confidence,
            "extractedAt": self.extracted_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Deadline":
        """Rebuild a record from ``to_dict`` output.

        Raises:
            KeyError, TypeError, ValueError: If the data is malformed
        """
        try:
            deadline_type = DeadlineType(data.get("type") or DeadlineType.ASSIGNMENT.value)
        except ValueError:
            deadline_type = DeadlineType.ASSIGNMENT

        due_date = data.get("dueDate")
        extracted_at = data.get("extractedAt")

        return cls(
            type=deadline_type,
            title=str(data["title"]),
            due_date=date.fromisoformat(due_date) if due_date else None,
            raw_text=str(data.get("rawText", "")),
            confidence=float(data.get("confidence", 0.0)),
            extracted_at=(
                datetime.fromisoformat(extracted_at)
                if extracted_at
                else datetime.fromtimestamp(0, tz=timezone.utc)
            ),
            icon=str(data.get("icon") or ICONS[deadline_type]),
        )


def _format_date(value: date | None) -> str:
    return value.isoformat() if value else "null"


def _as_datetime(now: date | datetime) -> datetime:
    if isinstance(now, datetime):
        return now if now.tzinfo else now.replace(tzinfo=timezone.utc)
    return datetime.combine(now, time.min, tzinfo=timezone.utc)


def normalize_deadline(
    raw_text: str,
    *,
    now: date | datetime,
    date_fallback: bool = False,
) -> Deadline:
    """Normalize one candidate string into a Deadline.

    Args:
        raw_text: Candidate string from the extractor
        now: Resolution time; used for year inference and as extracted_at
        date_fallback: Let dateparser try dates the built-in patterns miss

    Returns:
        Deadline (due_date is None when no date could be resolved)
    """
    category = categorize(raw_text)
    resolved = parse_deadline_date(raw_text, now=now, fallback=date_fallback)

    return Deadline(
        type=category.type,
        title=normalize_title(raw_text, default=category.type.value.capitalize()),
        due_date=resolved.value,
        raw_text=raw_text,
        confidence=category.confidence,
        extracted_at=_as_datetime(now),
        icon=category.icon,
    )


def dedupe_deadlines(deadlines: Iterable[Deadline], *, keep_undated: bool = False) -> list[Deadline]:
    """Drop repeated (title, due date) pairs, keeping the first occurrence.

    Undated records are dropped unless ``keep_undated`` is set.
    """
    seen: set[str] = set()
    unique: list[Deadline] = []

    for deadline in deadlines:
        if deadline.due_date is None and not keep_undated:
            continue
        key = deadline.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(deadline)

    return unique


def sort_deadlines(deadlines: Iterable[Deadline]) -> list[Deadline]:
    """Order by due date; undated records last, exams before quizzes before assignments."""
    def sort_key(deadline: Deadline) -> tuple[int, date, int]:
        if deadline.due_date is not None:
            return (0, deadline.due_date, 0)
        return (1, date.min, -TYPE_PRIORITY.get(deadline.type, 0))

    return sorted(deadlines, key=sort_key)


def process_deadlines(
    raw_deadlines: Iterable[str],
    *,
    now: date | datetime,
    date_fallback: bool = False,
    keep_undated: bool = False,
) -> list[Deadline]:
    """Normalize, deduplicate and sort candidate strings.

    Args:
        raw_deadlines: Candidate strings in extraction order
        now: Resolution time for year inference
        date_fallback: Let dateparser try dates the built-in patterns miss
        keep_undated: Keep records without a resolvable date (sorted last)

    Returns:
        Unique deadlines in due-date order
    """
    normalized = (
        normalize_deadline(raw, now=now, date_fallback=date_fallback)
        for raw in raw_deadlines
        if raw and raw.strip()
    )
    return sort_deadlines(dedupe_deadlines(normalized, keep_undated=keep_undated))


# =============================================================================
# Course-level helpers
# =============================================================================


def upcoming_deadlines(
    deadlines: Iterable[Deadline],
    *,
    today: date,
    within_days: int | None = None,
) -> list[Deadline]:
    """Dated deadlines due on or after ``today`` (optionally within N days)."""
    result = []
    for deadline in deadlines:
        if deadline.due_date is None or deadline.due_date < today:
            continue
        if within_days is not None and (deadline.due_date - today).days > within_days:
            continue
        result.append(deadline)
    return sort_deadlines(result)


def dominant_type(deadlines: Iterable[Deadline]) -> DeadlineType | None:
    """Most common deadline type in a course (first seen wins ties)."""
    counts = Counter(deadline.type for deadline in deadlines)
    if not counts:
        return None
    return counts.most_common(1)[0][0]
