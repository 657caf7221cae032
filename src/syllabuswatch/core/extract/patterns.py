"""
Built-in candidate matchers for course-outline text.

Each matcher scans the whole document independently; order only decides
which matcher gets credit for a candidate another one also finds.
"""

from __future__ import annotations

from .base import RegexMatcher

# "September 15, 2024", "Sept 15th 2024"
DATE_WITH_YEAR = r"\w+\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}"

# Same, year optional (greedy, so a year is taken when present)
DATE_OPTIONAL_YEAR = r"\w+\s+\d{1,2}(?:st|nd|rd|th)?\b(?:,?\s+\d{4}\b)?"

# "Assignment 2", "Lab Report 1", "Final Exam", "Midterm Exam"
DELIVERABLE_LABEL = (
    r"(?:(?:Final|Midterm|Lab|Group|Individual|Term|Course)[ \t]+)?"
    r"(?:Assignment|Homework|Lab|Midterm|Exam|Project|Report|Essay|Quiz|Test)"
    r"(?:[ \t]+(?:Report|Exam|Project))?"
    r"[ \t]*\d*"
)

# Assignment 1 - Due September 15, 2024
LABEL_DASH_DUE = RegexMatcher(
    "label_dash_due",
    rf"\b({DELIVERABLE_LABEL})\s*[-–—]\s*(?:Due\s*)?({DATE_WITH_YEAR})",
)

# Assignment 1 | Individual | 15% | September 15[, 2024]
TABLE_ROW = RegexMatcher(
    "table_row",
    r"([A-Za-z \t\d-]+?)[ \t]*\|[ \t]*(?:[A-Za-z \t]+\|[ \t]*)?\d{1,3}%[ \t]*\|[ \t]*"
    rf"({DATE_OPTIONAL_YEAR})",
)

# ... due on September 15, 2024 / submit by ... / bare dates
DUE_PHRASE = RegexMatcher(
    "due_phrase",
    rf"(\b(?:due|deadline|submit|hand[ \t]+in)\s+(?:on\s+|by\s+)?)?({DATE_WITH_YEAR})",
)

# Course ends December 20, 2024
TERM_END = RegexMatcher(
    "term_end",
    rf"\b((?:course|term|semester)\s*ends?)[\s\S]{{0,80}}?({DATE_WITH_YEAR})",
)

DEFAULT_MATCHERS: tuple[RegexMatcher, ...] = (
    LABEL_DASH_DUE,
    TABLE_ROW,
    DUE_PHRASE,
    TERM_END,
)
