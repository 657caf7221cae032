"""
Candidate extraction pipeline.

Runs every matcher over the document, screens date fragments, and
collects cleaned candidate strings with textual duplicates removed.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from syllabuswatch.core.normalize.parsing import is_valid_date_text, prepare_text
from .base import CandidateMatch, ExtractionResult, Extractor, Matcher
from .patterns import DEFAULT_MATCHERS

logger = logging.getLogger(__name__)

# Labels containing one of these already read as "due ..." and add nothing
DUE_WORDS = ("due", "deadline", "submit", "hand in")

_PIPE_ARTIFACT_RE = re.compile(r"\|\s*")
_DUE_WORD_RE = re.compile(r"\bdue\s*:?\s*", re.IGNORECASE)


def compose_candidate(label: str, date_text: str) -> str:
    """Build the candidate string for one match and clean it up."""
    label = " ".join(label.split())
    if label and not any(word in label.lower() for word in DUE_WORDS):
        text = f"{label}: {date_text}"
    else:
        text = date_text

    text = " ".join(text.split())
    text = _PIPE_ARTIFACT_RE.sub("", text)
    text = _DUE_WORD_RE.sub("", text)
    return " ".join(text.split())


class CandidateExtractor(Extractor):
    """Apply an ordered list of matchers to free text."""

    def __init__(
        self,
        matchers: Iterable[Matcher] | None = None,
        *,
        detect_html: bool = True,
    ) -> None:
        """Initialize the extractor.

        Args:
            matchers: Matchers to run, in order (built-in set if None)
            detect_html: Flatten input that looks like HTML before matching
        """
        self.matchers = list(matchers) if matchers is not None else list(DEFAULT_MATCHERS)
        self.detect_html = detect_html

    @property
    def name(self) -> str:
        return "pipeline"

    def extract(self, text: str) -> ExtractionResult:
        """Scan text with every matcher.

        Args:
            text: Document text (plain or an HTML fragment)

        Returns:
            ExtractionResult with unique candidates in first-seen order
        """
        result = ExtractionResult()
        plain = prepare_text(text, detect_html=self.detect_html)

        if not plain.strip():
            result.add_warning("Empty document")
            return result

        seen: dict[str, None] = {}

        for matcher in self.matchers:
            hits = 0
            for match in matcher.find(plain):
                candidate = self._accept(match, result)
                if candidate is None or candidate in seen:
                    continue
                seen[candidate] = None
                hits += 1
            result.matcher_hits[matcher.name] = hits

        result.candidates = list(seen)

        if not result.candidates:
            result.add_warning("No deadline candidates found")

        logger.debug(
            f"Extracted {len(result.candidates)} candidates",
            extra={"candidates": len(result.candidates)},
        )
        return result

    def _accept(self, match: CandidateMatch, result: ExtractionResult) -> str | None:
        if not match.date_text or not is_valid_date_text(match.date_text):
            if match.date_text:
                result.rejected_fragments.append(match.date_text)
            return None

        candidate = compose_candidate(match.label, match.date_text)
        return candidate or None


def extract_candidates(text: str, *, detect_html: bool = True) -> list[str]:
    """Convenience wrapper returning just the candidate strings."""
    return CandidateExtractor(detect_html=detect_html).extract(text).candidates
