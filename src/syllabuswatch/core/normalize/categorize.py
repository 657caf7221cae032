"""
Keyword-based deadline categorization.

The keyword table is an ordered list: when text mentions keywords of
several types, the type declared first wins.
"""

from __future__ import annotations

from dataclasses import dataclass

from syllabuswatch.core.config.models import DeadlineType


@dataclass(frozen=True)
class CategoryRule:
    """Keywords that identify one deadline type."""

    type: DeadlineType
    icon: str
    keywords: tuple[str, ...]


CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        type=DeadlineType.ASSIGNMENT,
        icon="📄",
        keywords=(
            "assignment",
            "hw",
            "homework",
            "project",
            "report",
            "essay",
            "submission",
            "submit",
            "lab",
        ),
    ),
    CategoryRule(
        type=DeadlineType.QUIZ,
        icon="🧪",
        keywords=("quiz", "test", "midterm", "assessment", "evaluation"),
    ),
    CategoryRule(
        type=DeadlineType.EXAM,
        icon="📅",
        keywords=("exam", "final", "examination", "finals"),
    ),
)

ICONS: dict[DeadlineType, str] = {rule.type: rule.icon for rule in CATEGORY_RULES}

DEFAULT_CONFIDENCE = 0.3


@dataclass(frozen=True)
class Category:
    """Result of categorizing a piece of text."""

    type: DeadlineType
    icon: str
    confidence: float
    keyword: str | None = None


def keyword_confidence(text: str, keyword: str) -> float:
    """Score a keyword match by how early it appears in the text."""
    words = text.split()
    index = next((i for i, word in enumerate(words) if keyword in word), -1)

    if index == -1:
        return 0.5
    if index < 3:
        return 0.9
    if index < 6:
        return 0.7
    return 0.5


def categorize(
    title: str,
    description: str = "",
    rules: tuple[CategoryRule, ...] = CATEGORY_RULES,
) -> Category:
    """Assign a deadline type and confidence to a title/description.

    Args:
        title: Deadline title or raw candidate text
        description: Optional extra text
        rules: Ordered keyword table (first matching type wins)

    Returns:
        Category, defaulting to a low-confidence assignment
    """
    text = f"{title} {description}".lower()

    for rule in rules:
        for keyword in rule.keywords:
            if keyword in text:
                return Category(
                    type=rule.type,
                    icon=rule.icon,
                    confidence=keyword_confidence(text, keyword),
                    keyword=keyword,
                )

    return Category(
        type=DeadlineType.ASSIGNMENT,
        icon=ICONS[DeadlineType.ASSIGNMENT],
        confidence=DEFAULT_CONFIDENCE,
    )
