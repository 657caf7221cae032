"""
Extraction base classes and data structures.

Defines the interface for candidate matchers and extractors.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class CandidateMatch:
    """One raw hit of a matcher: an optional label and a date fragment."""

    matcher: str
    label: str
    date_text: str
    start: int = 0


@dataclass
class ExtractionResult:
    """Result of scanning a document for deadline candidates."""

    # Unique cleaned candidate strings, in first-seen order
    candidates: list[str] = field(default_factory=list)

    # How many new candidates each matcher contributed
    matcher_hits: dict[str, int] = field(default_factory=dict)

    # Date fragments that failed the month/day screen
    rejected_fragments: list[str] = field(default_factory=list)

    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Check if anything was found."""
        return len(self.candidates) > 0

    @property
    def candidate_count(self) -> int:
        return len(self.candidates)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)


class Matcher(ABC):
    """Abstract base class for a single candidate pattern."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Matcher identifier."""
        pass

    @abstractmethod
    def find(self, text: str) -> Iterator[CandidateMatch]:
        """Yield every match in the whole text."""
        pass


class RegexMatcher(Matcher):
    """Matcher backed by a regex with a label group and a date group."""

    def __init__(
        self,
        name: str,
        pattern: str | re.Pattern[str],
        *,
        label_group: int | str = 1,
        date_group: int | str = 2,
        flags: int = re.IGNORECASE,
    ) -> None:
        self._name = name
        self.pattern = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern, flags)
        self.label_group = label_group
        self.date_group = date_group

    @property
    def name(self) -> str:
        return self._name

    def find(self, text: str) -> Iterator[CandidateMatch]:
        for match in self.pattern.finditer(text):
            yield CandidateMatch(
                matcher=self.name,
                label=(match.group(self.label_group) or "").strip(),
                date_text=(match.group(self.date_group) or "").strip(),
                start=match.start(),
            )

    def __repr__(self) -> str:
        return f"<RegexMatcher(name='{self.name}')>"


class Extractor(ABC):
    """Abstract base class for candidate extraction strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Extractor identifier."""
        pass

    @abstractmethod
    def extract(self, text: str) -> ExtractionResult:
        """Extract deadline candidates from document text.

        Args:
            text: Plain document text

        Returns:
            ExtractionResult with candidate strings
        """
        pass
