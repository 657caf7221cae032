import logging
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from syllabuswatch.core.config.models import DeadlineType
from syllabuswatch.core.normalize.canonical import Deadline

NOW = date(2024, 8, 1)

SAMPLE_OUTLINE = """
    Course Outline - Computer Science 101

    Assessment Schedule:

    Assignment 1 - Due September 15, 2024
    Lab Report 1 - Due September 22, 2024
    Midterm Exam - October 10, 2024
    Assignment 2 - Due October 25, 2024
    Final Project - Due November 30, 2024
    Final Exam - December 15, 2024

    Course Deliverables:

    Assignment 1 | Individual | 15% | September 15, 2024
    Lab Report 1 | Individual | 10% | September 22, 2024
    Midterm Exam | Individual | 25% | October 10, 2024
    Assignment 2 | Group | 20% | October 25, 2024
    Final Project | Group | 20% | November 30, 2024
    Final Exam | Individual | 30% | December 15, 2024

    Course ends December 20, 2024
"""


def make_deadline(
    title,
    due,
    type=DeadlineType.ASSIGNMENT,
    confidence=0.9,
    raw_text=None,
):
    """Build a Deadline with sensible defaults for tests."""
    return Deadline(
        type=type,
        title=title,
        due_date=due,
        raw_text=raw_text if raw_text is not None else f"{title}: {due}",
        confidence=confidence,
        extracted_at=datetime(2024, 8, 1, tzinfo=timezone.utc),
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging so they never outlive a test."""
    yield
    logger = logging.getLogger("syllabuswatch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_outline():
    return SAMPLE_OUTLINE


@pytest.fixture
def outline_file(tmp_path: Path) -> Path:
    path = tmp_path / "outline.txt"
    path.write_text(SAMPLE_OUTLINE, encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """App config with quiet logging and snapshots under tmp_path."""
    path = tmp_path / "app.yaml"
    path.write_text(
        "storage:\n"
        "  backend: json\n"
        f"  path: {tmp_path / 'snapshots.json'}\n"
        "logging:\n"
        "  level: WARNING\n"
        "  rich_console: false\n",
        encoding="utf-8",
    )
    return path
