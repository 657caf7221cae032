import pytest

from syllabuswatch.core.extract.base import RegexMatcher
from syllabuswatch.core.extract.patterns import DEFAULT_MATCHERS, TERM_END
from syllabuswatch.core.extract.pipeline import (
    CandidateExtractor,
    compose_candidate,
    extract_candidates,
)


def test_sample_outline_candidates(sample_outline):
    result = CandidateExtractor().extract(sample_outline)

    assert result.ok
    assert result.candidates[:6] == [
        "Assignment 1: September 15, 2024",
        "Lab Report 1: September 22, 2024",
        "Midterm Exam: October 10, 2024",
        "Assignment 2: October 25, 2024",
        "Final Project: November 30, 2024",
        "Final Exam: December 15, 2024",
    ]
    assert "Course ends: December 20, 2024" in result.candidates
    assert "December 20, 2024" in result.candidates
    assert len(result.candidates) == len(set(result.candidates))


def test_matcher_hits_count_new_candidates_only(sample_outline):
    result = CandidateExtractor().extract(sample_outline)

    # Table rows repeat the dash lines exactly, so they add nothing new
    assert result.matcher_hits == {
        "label_dash_due": 6,
        "table_row": 0,
        "due_phrase": 7,
        "term_end": 1,
    }
    assert result.candidate_count == 14


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Assignment 3 – Due March 3rd, 2025", "Assignment 3: March 3rd, 2025"),
        ("Final Exam — December 15, 2024", "Final Exam: December 15, 2024"),
        ("Quiz 2 | 5% | October 3", "Quiz 2: October 3"),
        ("Essay | Individual | 20% | January 15", "Essay: January 15"),
        ("The term ends on Friday, December 13, 2024.", "term ends: December 13, 2024"),
    ],
)
def test_recognized_shapes(text, expected):
    assert expected in extract_candidates(text)


def test_due_phrase_label_is_dropped():
    assert extract_candidates("Project due on April 4, 2025") == ["April 4, 2025"]


def test_undated_table_rows_without_weight_are_ignored():
    assert extract_candidates("Quiz 2 | Individual | October 3") == []


def test_rejected_fragments_are_recorded():
    result = CandidateExtractor().extract("Lecture hall Room 12, 2024")

    assert result.candidates == []
    assert "Room 12, 2024" in result.rejected_fragments
    assert "No deadline candidates found" in result.warnings


def test_html_input_is_flattened():
    markup = (
        "<ul><li>Assignment 1 - Due September 15, 2024</li>"
        "<li>Quiz 1 - Due October 2, 2024</li></ul>"
    )

    candidates = extract_candidates(markup)

    assert "Assignment 1: September 15, 2024" in candidates
    assert "Quiz 1: October 2, 2024" in candidates


def test_html_detection_can_be_disabled():
    markup = "<table><tr><td>Quiz 1</td><td>10%</td><td>October 2</td></tr></table>"

    assert extract_candidates(markup) == ["Quiz 1: October 2"]
    assert extract_candidates(markup, detect_html=False) == []


@pytest.mark.parametrize(
    "text",
    ["", "   ", "|||", "- - -", "Due:", "September", "<<>>", "<p>unclosed", "\x00", "12/31/9999"],
)
def test_odd_input_never_raises(text):
    result = CandidateExtractor().extract(text)

    assert result.candidates == []
    assert result.warnings


def test_empty_document_warning():
    result = CandidateExtractor().extract("")

    assert result.warnings == ["Empty document"]
    assert result.matcher_hits == {}


def test_custom_matchers(sample_outline):
    extractor = CandidateExtractor(matchers=[TERM_END])

    assert extractor.extract(sample_outline).candidates == ["Course ends: December 20, 2024"]


def test_regex_matcher_with_named_groups():
    matcher = RegexMatcher(
        "week_marker",
        r"(?P<label>Reading week)\s+starts\s+(?P<date>\w+ \d{1,2})",
        label_group="label",
        date_group="date",
    )
    extractor = CandidateExtractor(matchers=[matcher, *DEFAULT_MATCHERS])

    result = extractor.extract("Reading week starts October 14")

    assert result.candidates == ["Reading week: October 14"]
    assert result.matcher_hits["week_marker"] == 1


@pytest.mark.parametrize(
    "label, date_text, expected",
    [
        ("Assignment 1", "September 15, 2024", "Assignment 1: September 15, 2024"),
        ("due on", "September 15, 2024", "September 15, 2024"),
        ("Deadline", "Oct 3", "Oct 3"),
        ("", "September   15,\n 2024", "September 15, 2024"),
        ("Lab 2 | Group", "Oct 3", "Lab 2 Group: Oct 3"),
    ],
)
def test_compose_candidate(label, date_text, expected):
    assert compose_candidate(label, date_text) == expected
