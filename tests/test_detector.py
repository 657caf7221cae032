import threading
import time
from dataclasses import replace
from datetime import date, datetime, timezone

import pytest
from conftest import make_deadline

from syllabuswatch.core.config.models import DeadlineType
from syllabuswatch.core.tracking.detector import DEFAULT_STORAGE_KEY, ChangeDetector, ChangeReport
from syllabuswatch.core.tracking.locks import CourseLockRegistry
from syllabuswatch.core.tracking.store import MemoryStore, StorageError


def _fixed_clock():
    return datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


def _cs101():
    return [
        make_deadline("Assignment 1", date(2024, 9, 15)),
        make_deadline("Midterm Exam", date(2024, 10, 10), type=DeadlineType.QUIZ),
    ]


class BrokenStore:
    """Store whose reads and/or writes always fail."""

    def __init__(self, fail_get=True, fail_set=True):
        self.fail_get = fail_get
        self.fail_set = fail_set

    def get(self, key):
        if self.fail_get:
            raise ConnectionError("storage unreachable")
        return None

    def set(self, key, value):
        if self.fail_set:
            raise ConnectionError("storage unreachable")


class SlowStore(MemoryStore):
    """MemoryStore that yields between read and write."""

    def get(self, key):
        value = super().get(key)
        time.sleep(0.005)
        return value


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def detector(store):
    return ChangeDetector(store, clock=_fixed_clock)


def test_first_scrape_then_unchanged_then_rescheduled(detector, store):
    first = detector.detect_changes("CS101", _cs101())

    assert first.has_changes
    assert first.is_first_scrape
    assert [d.title for d in first.added] == ["Assignment 1", "Midterm Exam"]
    assert store.writes == 1

    second = detector.detect_changes("CS101", _cs101())

    assert not second.has_changes
    assert not second.is_first_scrape
    assert store.writes == 1

    moved = [replace(_cs101()[0], due_date=date(2024, 9, 22)), _cs101()[1]]
    third = detector.detect_changes("CS101", moved)

    assert third.has_changes
    assert third.added == [] and third.removed == []
    assert third.modified[0].old.due_date == date(2024, 9, 15)
    assert third.modified[0].new.due_date == date(2024, 9, 22)
    assert store.writes == 2


def test_reordered_scrape_is_unchanged(detector, store):
    detector.detect_changes("CS101", _cs101())

    report = detector.detect_changes("CS101", list(reversed(_cs101())))

    assert not report.has_changes
    assert store.writes == 1


def test_type_change_reports_remove_and_add(detector):
    detector.detect_changes("CS101", _cs101())
    retyped = [_cs101()[0], replace(_cs101()[1], type=DeadlineType.EXAM)]

    report = detector.detect_changes("CS101", retyped)

    assert [d.type for d in report.added] == [DeadlineType.EXAM]
    assert [d.type for d in report.removed] == [DeadlineType.QUIZ]
    assert report.modified == []


def test_snapshot_layout(detector, store):
    detector.detect_changes("CS101", _cs101())

    snapshots = store.get(DEFAULT_STORAGE_KEY)
    snapshot = snapshots["CS101"]

    assert set(snapshot) == {"deadlines", "hash", "timestamp"}
    assert snapshot["timestamp"] == int(_fixed_clock().timestamp() * 1000)
    assert [d["title"] for d in snapshot["deadlines"]] == ["Assignment 1", "Midterm Exam"]


def test_courses_are_tracked_independently(detector):
    detector.detect_changes("CS101", _cs101())

    report = detector.detect_changes("MATH200", [make_deadline("Quiz 1", date(2024, 9, 5))])

    assert report.is_first_scrape
    assert detector.list_courses() == ["CS101", "MATH200"]


def test_custom_storage_key():
    store = MemoryStore()
    detector = ChangeDetector(store, storage_key="courses/v2")

    detector.detect_changes("CS101", _cs101())

    assert store.get("courses/v2") is not None
    assert store.get(DEFAULT_STORAGE_KEY) is None


@pytest.mark.parametrize(
    "broken",
    [BrokenStore(fail_get=True, fail_set=False), BrokenStore(fail_get=False, fail_set=True)],
)
def test_storage_failure_is_reported_not_raised(broken):
    report = ChangeDetector(broken).detect_changes("CS101", _cs101())

    assert not report.ok
    assert not report.has_changes
    assert "storage unreachable" in report.error
    assert report.to_dict() == {"hasChanges": False, "error": report.error}
    assert report.summary.startswith("Change detection failed")


def test_storage_failure_is_logged(caplog):
    with caplog.at_level("ERROR", logger="syllabuswatch"):
        ChangeDetector(BrokenStore()).detect_changes("CS101", _cs101())

    assert any("Error detecting changes" in r.getMessage() for r in caplog.records)
    assert any(getattr(r, "course", None) == "CS101" for r in caplog.records)


@pytest.mark.parametrize(
    "stored",
    [
        ["not", "a", "map"],
        {"CS101": "garbage"},
        {"CS101": {"deadlines": "x", "hash": "abc"}},
        {"CS101": {"deadlines": []}},
    ],
)
def test_malformed_snapshots_are_reported(stored):
    store = MemoryStore({DEFAULT_STORAGE_KEY: stored})

    report = ChangeDetector(store).detect_changes("CS101", _cs101())

    assert report.error is not None
    assert store.writes == 0


def test_report_to_dict():
    deadline = make_deadline("Quiz 1", date(2024, 10, 2), type=DeadlineType.QUIZ)

    data = ChangeReport(has_changes=True, is_first_scrape=True, added=[deadline]).to_dict()

    assert data["hasChanges"] is True
    assert data["isFirstScrape"] is True
    assert data["added"][0]["title"] == "Quiz 1"
    assert data["removed"] == [] and data["modified"] == []
    assert "error" not in data


def test_report_summaries():
    deadline = make_deadline("Quiz 1", date(2024, 10, 2))

    assert ChangeReport(has_changes=True, is_first_scrape=True, added=[deadline]).summary == "First scrape: 1 deadline(s)"
    assert ChangeReport(has_changes=False).summary == "No changes"
    assert ChangeReport(has_changes=True, removed=[deadline]).summary == "1 removed"


def test_get_and_clear_snapshot(detector):
    detector.detect_changes("CS101", _cs101())

    snapshot = detector.get_snapshot("CS101")

    assert [d.title for d in snapshot.deadlines] == ["Assignment 1", "Midterm Exam"]
    assert detector.clear_snapshot("CS101") is True
    assert detector.clear_snapshot("CS101") is False
    assert detector.get_snapshot("CS101") is None
    assert detector.detect_changes("CS101", _cs101()).is_first_scrape


def test_maintenance_calls_survive_broken_store():
    detector = ChangeDetector(BrokenStore())

    assert detector.get_snapshot("CS101") is None
    assert detector.list_courses() == []
    assert detector.clear_snapshot("CS101") is False


def test_same_course_scrapes_are_serialized():
    store = SlowStore()
    detector = ChangeDetector(store)
    reports = []
    barrier = threading.Barrier(8)

    def scrape():
        barrier.wait()
        reports.append(detector.detect_changes("CS101", _cs101()))

    threads = [threading.Thread(target=scrape) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(r.is_first_scrape for r in reports) == 1
    assert sum(r.has_changes for r in reports) == 1
    assert store.writes == 1


def test_different_courses_do_not_lose_updates():
    store = SlowStore()
    detector = ChangeDetector(store)
    courses = [f"COURSE{i}" for i in range(6)]

    threads = [
        threading.Thread(target=detector.detect_changes, args=(course, _cs101()))
        for course in courses
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert detector.list_courses() == courses


def test_lock_registry():
    locks = CourseLockRegistry()

    assert locks.get("CS101") is locks.get("CS101")
    assert locks.get("CS101") is not locks.get("MATH200")
    assert len(locks) == 2

    with locks.hold("CS101"):
        assert locks.is_locked("CS101")
        assert not locks.is_locked("MATH200")
    assert not locks.is_locked("CS101")
    assert not locks.is_locked("UNKNOWN")


def test_shared_lock_registry():
    locks = CourseLockRegistry()
    detector = ChangeDetector(MemoryStore(), locks=locks)

    detector.detect_changes("CS101", _cs101())

    assert len(locks) == 1
    assert not locks.is_locked("CS101")


def test_storage_error_carries_key():
    error = StorageError("boom", key="deadlineSnapshots")

    assert error.key == "deadlineSnapshots"
    assert str(error) == "boom"
