"""
Parsing utilities for normalizing extracted deadline text.

Handles date resolution, title cleanup, and text/HTML cleanup.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable

import dateparser
from lxml import etree
from lxml import html as lxml_html


# =============================================================================
# Month Names
# =============================================================================


MONTH_NUMBERS: dict[str, int] = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
    # Abbreviations
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "sept": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

# Longest names first so "sept" wins over "sep" and "june" over "jun"
MONTH_PATTERN = "|".join(sorted(MONTH_NUMBERS, key=len, reverse=True))

_MONTH_WORD_RE = re.compile(rf"\b(?:{MONTH_PATTERN})\b\.?", re.IGNORECASE)
_DAY_NUMBER_RE = re.compile(r"\d{1,2}")


def month_number(name: str) -> int | None:
    """Look up a month number from an English name or abbreviation."""
    return MONTH_NUMBERS.get(name.lower().rstrip("."))


def is_valid_date_text(text: str) -> bool:
    """Cheap screen for date fragments: a month name plus a 1-2 digit number."""
    if not text:
        return False
    return bool(_MONTH_WORD_RE.search(text)) and bool(_DAY_NUMBER_RE.search(text))


# =============================================================================
# Date Resolution
# =============================================================================


@dataclass
class ResolvedDate:
    """Result of resolving a date fragment."""

    value: date | None
    original: str
    confidence: float  # 0.0 - 1.0
    format_detected: str | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None


_ORDINAL = r"(?:st|nd|rd|th)?"

_MONTH_DAY_YEAR_RE = re.compile(
    rf"\b(?P<month>{MONTH_PATTERN})\.?\s+(?P<day>\d{{1,2}}){_ORDINAL},?\s+(?P<year>\d{{4}})\b",
    re.IGNORECASE,
)
# Never matches a day that is followed by a year
_MONTH_DAY_RE = re.compile(
    rf"\b(?P<month>{MONTH_PATTERN})\.?\s+(?P<day>\d{{1,2}}){_ORDINAL}\b(?!,?\s*\d{{4}}\b)",
    re.IGNORECASE,
)
_US_NUMERIC_RE = re.compile(r"\b(?P<month>\d{1,2})/(?P<day>\d{1,2})/(?P<year>\d{4})\b")
_ISO_DATE_RE = re.compile(r"\b(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})\b")


def infer_year(month: int, now: date | datetime) -> int:
    """Pick the year for a date written without one.

    Months earlier than the current month roll into the next year;
    the current month and later months stay in the current year.
    """
    if month < now.month:
        return now.year + 1
    return now.year


def _build_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _from_month_day_year(match: re.Match[str], now: date | datetime) -> date | None:
    month = month_number(match.group("month"))
    if month is None:
        return None
    return _build_date(int(match.group("year")), month, int(match.group("day")))


def _from_month_day(match: re.Match[str], now: date | datetime) -> date | None:
    month = month_number(match.group("month"))
    if month is None:
        return None
    return _build_date(infer_year(month, now), month, int(match.group("day")))


def _from_numeric(match: re.Match[str], now: date | datetime) -> date | None:
    return _build_date(
        int(match.group("year")),
        int(match.group("month")),
        int(match.group("day")),
    )


# Ordered most to least specific
DATE_PATTERNS: list[tuple[str, re.Pattern[str], Callable[[re.Match[str], date | datetime], date | None], float]] = [
    ("month_day_year", _MONTH_DAY_YEAR_RE, _from_month_day_year, 1.0),
    ("month_day", _MONTH_DAY_RE, _from_month_day, 0.8),
    ("us_numeric", _US_NUMERIC_RE, _from_numeric, 0.85),
    ("iso_date", _ISO_DATE_RE, _from_numeric, 0.9),
]


def parse_deadline_date(
    text: str | None,
    *,
    now: date | datetime,
    fallback: bool = False,
) -> ResolvedDate:
    """Resolve a free-text date fragment to a calendar date.

    Patterns are tried in priority order (month-name with year, month-name
    without year, MM/DD/YYYY, YYYY-MM-DD). Within a pattern every match is
    tried until one is a real calendar date. A missing year is inferred
    from ``now``.

    Args:
        text: Text containing the date fragment
        now: Resolution time used for year inference
        fallback: Try dateparser when no built-in pattern resolves

    Returns:
        ResolvedDate with the date, or value None when nothing resolved
    """
    original = (text or "").strip()
    if not original:
        return ResolvedDate(value=None, original=original, confidence=0.0)

    for name, pattern, build, confidence in DATE_PATTERNS:
        for match in pattern.finditer(original):
            value = build(match, now)
            if value is not None:
                return ResolvedDate(
                    value=value,
                    original=original,
                    confidence=confidence,
                    format_detected=name,
                )

    if fallback:
        value = _dateparser_fallback(original, now)
        if value is not None:
            return ResolvedDate(
                value=value,
                original=original,
                confidence=0.6,
                format_detected="dateparser",
            )

    return ResolvedDate(value=None, original=original, confidence=0.0)


def resolve_date(text: str | None, *, now: date | datetime, fallback: bool = False) -> date | None:
    """Resolve a date fragment, returning just the date (or None)."""
    return parse_deadline_date(text, now=now, fallback=fallback).value


def _dateparser_fallback(text: str, now: date | datetime) -> date | None:
    """Let dateparser handle day-first and other English layouts."""
    base = now if isinstance(now, datetime) else datetime.combine(now, datetime.min.time())
    settings = {
        "RELATIVE_BASE": base.replace(tzinfo=None),
        "STRICT_PARSING": True,
        "REQUIRE_PARTS": ["day", "month", "year"],
        "RETURN_AS_TIMEZONE_AWARE": False,
        "DATE_ORDER": "MDY",
    }
    parsed = dateparser.parse(text, languages=["en"], settings=settings)
    return parsed.date() if parsed else None


# =============================================================================
# Title Normalization
# =============================================================================


_TITLE_STRIP_PATTERNS = [
    # Leading role words
    re.compile(r"^(?:due|deadline|ends|assignment|quiz|exam)\s*:\s*", re.IGNORECASE),
    # Trailing "due: ..." / "deadline: ..." / "ends: ..."
    re.compile(r"\s*\b(?:due|deadline|ends)\s*:.*$", re.IGNORECASE),
    # Trailing "- September 15, 2024 ..."
    re.compile(r"\s*-\s*\w+\s+\d{1,2}(?:,\s+\d{4})?.*$", re.IGNORECASE),
    # Trailing "09/15/2024 ..."
    re.compile(r"\s*\d{1,2}/\d{1,2}/\d{4}.*$"),
    # Trailing ": September 15 ..."
    re.compile(r":\s*\w+\s+\d{1,2}.*$", re.IGNORECASE),
]

# Only a leading month name counts as a bare date; "Assignment 1" stays a title
_BARE_DATE_RE = re.compile(rf"^(?:{MONTH_PATTERN})\.?\s+\d{{1,2}}", re.IGNORECASE)

# Last-resort labels, checked in this order against the original text
FALLBACK_TITLES: list[tuple[str, str]] = [
    ("assignment", "Assignment"),
    ("exam", "Exam"),
    ("project", "Project"),
    ("lab", "Lab"),
    ("quiz", "Quiz"),
]

DEFAULT_TITLE = "Assignment"


def normalize_title(raw_text: str | None, default: str = DEFAULT_TITLE) -> str:
    """Strip due-date boilerplate from a candidate string to get its title.

    Never returns an empty string: ``default`` is used when nothing is left.
    """
    text = normalize_whitespace(raw_text)
    title = text

    for pattern in _TITLE_STRIP_PATTERNS:
        title = pattern.sub("", title)

    if _BARE_DATE_RE.match(title):
        lowered = text.lower()
        for keyword, label in FALLBACK_TITLES:
            if keyword in lowered:
                title = label
                break

    return title.strip() or default


# =============================================================================
# Text Cleanup
# =============================================================================


def normalize_whitespace(text: str | None) -> str:
    """Normalize whitespace in text."""
    if text is None:
        return ""
    return " ".join(text.split())


_WHITESPACE_RE = re.compile(r"\s+")

_HTML_TAG_RE = re.compile(r"<\s*/?\s*[a-zA-Z][a-zA-Z0-9]*(?:\s[^>]*)?/?\s*>")

_BLOCK_TAGS = {
    "p", "div", "li", "tr", "ul", "ol", "table", "tbody", "thead",
    "h1", "h2", "h3", "h4", "h5", "h6", "section", "article", "header",
    "footer", "blockquote", "pre", "dt", "dd",
}
_CELL_TAGS = {"td", "th"}


def looks_like_html(text: str | None) -> bool:
    """Check whether text contains markup tags."""
    if not text:
        return False
    return bool(_HTML_TAG_RE.search(text))


def html_to_text(markup: str | None) -> str:
    """Flatten an HTML fragment into line-oriented text.

    Block elements end a line and table cells are joined with " | " so
    that table rows keep the pipe-delimited shape the extractor expects.
    Markup lxml cannot parse is returned unchanged.
    """
    if markup is None or not markup.strip():
        return ""

    try:
        root = lxml_html.fragment_fromstring(markup, create_parent="div")
    except (etree.ParserError, etree.XMLSyntaxError, ValueError):
        return markup

    for element in list(root.iter("script", "style")):
        element.drop_tree()

    for element in root.iter():
        if not isinstance(element.tag, str):
            continue
        # Source whitespace is insignificant; line breaks come from the tags
        if element.text:
            element.text = _WHITESPACE_RE.sub(" ", element.text)
        if element.tail:
            element.tail = _WHITESPACE_RE.sub(" ", element.tail)
        tag = element.tag.lower()
        if tag in _CELL_TAGS:
            element.tail = " | " + (element.tail or "")
        elif tag == "br" or tag in _BLOCK_TAGS:
            element.tail = "\n" + (element.tail or "")

    lines = (normalize_whitespace(line) for line in root.text_content().splitlines())
    return "\n".join(line for line in lines if line)


def prepare_text(text: str | None, *, detect_html: bool = True) -> str:
    """Turn raw document text into plain text ready for extraction."""
    if text is None:
        return ""
    if detect_html and looks_like_html(text):
        return html_to_text(text)
    return text
