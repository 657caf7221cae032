"""Candidate extraction from course-outline text."""

from .base import CandidateMatch, Extractor, ExtractionResult, Matcher, RegexMatcher
from .patterns import DEFAULT_MATCHERS
from .pipeline import CandidateExtractor, compose_candidate, extract_candidates

__all__ = [
    "CandidateMatch",
    "Extractor",
    "ExtractionResult",
    "Matcher",
    "RegexMatcher",
    "DEFAULT_MATCHERS",
    "CandidateExtractor",
    "compose_candidate",
    "extract_candidates",
]
