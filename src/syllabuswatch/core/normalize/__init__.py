"""Normalization, categorization and diffing of extracted deadlines."""

from .parsing import (
    ResolvedDate,
    parse_deadline_date,
    resolve_date,
    infer_year,
    is_valid_date_text,
    month_number,
    normalize_title,
    normalize_whitespace,
    html_to_text,
    looks_like_html,
    prepare_text,
)
from .categorize import Category, CategoryRule, CATEGORY_RULES, categorize
from .canonical import (
    Deadline,
    normalize_deadline,
    dedupe_deadlines,
    sort_deadlines,
    process_deadlines,
    upcoming_deadlines,
    dominant_type,
)
from .diff import (
    DeadlineChange,
    DiffResult,
    compute_snapshot_hash,
    compare_deadlines,
    summarize_changes,
)

__all__ = [
    # Parsing
    "ResolvedDate",
    "parse_deadline_date",
    "resolve_date",
    "infer_year",
    "is_valid_date_text",
    "month_number",
    "normalize_title",
    "normalize_whitespace",
    "html_to_text",
    "looks_like_html",
    "prepare_text",
    # Categorization
    "Category",
    "CategoryRule",
    "CATEGORY_RULES",
    "categorize",
    # Canonical
    "Deadline",
    "normalize_deadline",
    "dedupe_deadlines",
    "sort_deadlines",
    "process_deadlines",
    "upcoming_deadlines",
    "dominant_type",
    # Diff
    "DeadlineChange",
    "DiffResult",
    "compute_snapshot_hash",
    "compare_deadlines",
    "summarize_changes",
]
