"""
Tests for ProgressTracker: upsert semantics, completion and stale cleanup.

All tests run fully offline against the in-memory stores.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from app.core.errors import NotFoundError
from app.models.progress import AnswerSelection, ProgressCompleted, ProgressRecord
from app.models.test import ByTopic, OptionRecord, QuestionRecord, TestDefinition
from app.services.progress_store import InMemoryProgressStore
from app.services.progress_tracker import (
    STALE_COMPLETED,
    STALE_EMPTY_TEST,
    STALE_FULLY_ANSWERED,
    STALE_MISSING_TEST,
    ProgressTracker,
    find_stale,
    progress_percent,
)
from app.services.test_repository import TestRepository
from app.services.test_store import InMemoryTestStore


# ---------------------------------------------------------------------------
# Fixtures / helpers
# ---------------------------------------------------------------------------

def _question(n: int) -> QuestionRecord:
    return QuestionRecord(
        question_id=f"q{n}",
        text=f"Question number {n}?",
        options=[OptionRecord(option_id=i, text=f"Choice {i}{n}") for i in "abcd"],
        correct_option_id="a",
    )


def _definition(questions: int = 3) -> TestDefinition:
    return TestDefinition(
        title="Test: Volcanoes",
        source=ByTopic(topic_id="t-1"),
        difficulty="low",
        questions=[_question(i) for i in range(1, questions + 1)],
        time_limit_seconds=1800,
        created_by="u1",
    )


def _answers(*qids):
    return [AnswerSelection(question_id=q, selected_option_id="b") for q in qids]


@pytest.fixture
def env():
    tests = InMemoryTestStore()
    progress = InMemoryProgressStore()
    tracker = ProgressTracker(TestRepository(tests), progress)
    return tracker, tests, progress


# ---------------------------------------------------------------------------
# save
# ---------------------------------------------------------------------------

class TestSave:
    def test_first_save_creates_record(self, env):
        tracker, tests, progress = env
        test = tests.save(_definition())
        record = tracker.save("u1", test.id, 1, _answers("q1"), 1500)
        assert isinstance(record, ProgressRecord)
        assert progress.list_user("u1") == [record]

    def test_same_key_overwrites(self, env):
        tracker, tests, progress = env
        test = tests.save(_definition())
        tracker.save("u1", test.id, 1, _answers("q1"), 1500)
        tracker.save("u1", test.id, 2, _answers("q1", "q2"), 1200)

        rows = progress.list_user("u1")
        assert len(rows) == 1
        assert rows[0].current_question_index == 2
        assert rows[0].time_left_seconds == 1200

    def test_identical_payload_twice_leaves_one_row(self, env):
        tracker, tests, progress = env
        test = tests.save(_definition())
        for _ in range(2):
            tracker.save("u1", test.id, 1, _answers("q1"), 1500)
        assert len(progress.list_user("u1")) == 1

    def test_all_answered_completes_and_deletes(self, env):
        tracker, tests, progress = env
        test = tests.save(_definition(questions=2))
        tracker.save("u1", test.id, 1, _answers("q1"), 1500)

        result = tracker.save("u1", test.id, 2, _answers("q1", "q2"), 1000)

        assert isinstance(result, ProgressCompleted)
        assert result.completed is True
        assert progress.get("u1", test.id) is None
        assert tracker.list("u1") == []
        with pytest.raises(NotFoundError):
            tracker.get("u1", test.id)

    def test_repeated_answers_count_once(self, env):
        tracker, tests, _ = env
        test = tests.save(_definition(questions=2))
        answers = _answers("q1") + [AnswerSelection(question_id="q1", selected_option_id="c")]
        record = tracker.save("u1", test.id, 1, answers)
        assert isinstance(record, ProgressRecord)
        assert [a.selected_option_id for a in record.answers] == ["c"]

    def test_unknown_test(self, env):
        tracker, _, _ = env
        with pytest.raises(NotFoundError):
            tracker.save("u1", "missing", 0, [])

    def test_users_are_independent(self, env):
        tracker, tests, progress = env
        test = tests.save(_definition())
        tracker.save("u1", test.id, 1, _answers("q1"))
        tracker.save("u2", test.id, 2, _answers("q1", "q2"))
        assert len(progress.list_user("u1")) == 1
        assert len(progress.list_user("u2")) == 1


# ---------------------------------------------------------------------------
# Staleness
# ---------------------------------------------------------------------------

class TestFindStale:
    def _record(self, answered=1, status="in_progress"):
        return ProgressRecord(
            user_id="u1", test_id="t", answers=_answers(*[f"q{i}" for i in range(1, answered + 1)]),
            status=status,
        )

    def test_live(self):
        assert find_stale(self._record(), _definition()) is None

    def test_missing_test(self):
        assert find_stale(self._record(), None) == STALE_MISSING_TEST

    def test_empty_test(self):
        empty = _definition(questions=0)
        assert find_stale(self._record(), empty) == STALE_EMPTY_TEST

    def test_fully_answered(self):
        assert find_stale(self._record(answered=3), _definition()) == STALE_FULLY_ANSWERED

    def test_completed_status(self):
        assert find_stale(self._record(status="completed"), _definition()) == STALE_COMPLETED


class TestPercent:
    @pytest.mark.parametrize("answered, total, expected", [
        (0, 3, 0), (1, 3, 33), (2, 3, 66), (3, 3, 100), (1, 0, 0),
    ])
    def test_floor(self, answered, total, expected):
        assert progress_percent(answered, total) == expected


# ---------------------------------------------------------------------------
# list / get / delete
# ---------------------------------------------------------------------------

class TestReads:
    def test_list_projects_summary(self, env):
        tracker, tests, _ = env
        test = tests.save(_definition())
        tracker.save("u1", test.id, 2, _answers("q1", "q2"), 900)

        [summary] = tracker.list("u1")
        assert summary.test_id == test.id
        assert summary.title == "Test: Volcanoes"
        assert summary.progress_percent == 66
        assert summary.time_left_seconds == 900
        assert summary.current_question_index == 2
        assert summary.status == "in_progress"

    def test_list_cleans_up_deleted_tests(self, env):
        tracker, tests, progress = env
        keep = tests.save(_definition())
        gone = tests.save(_definition())
        tracker.save("u1", keep.id, 1, _answers("q1"))
        tracker.save("u1", gone.id, 1, _answers("q1"))
        tests._data.pop(gone.id)

        assert [s.test_id for s in tracker.list("u1")] == [keep.id]
        assert progress.get("u1", gone.id) is None

    def test_list_cleans_up_fully_answered_rows(self, env):
        tracker, tests, progress = env
        test = tests.save(_definition(questions=2))
        # written behind the tracker's back, e.g. by an older client
        progress.upsert(ProgressRecord(user_id="u1", test_id=test.id, answers=_answers("q1", "q2")))
        assert tracker.list("u1") == []
        assert progress.list_user("u1") == []

    def test_get_live(self, env):
        tracker, tests, _ = env
        test = tests.save(_definition())
        tracker.save("u1", test.id, 1, _answers("q1"))
        assert tracker.get("u1", test.id).current_question_index == 1

    def test_get_stale_is_not_found_and_removed(self, env):
        tracker, tests, progress = env
        test = tests.save(_definition())
        tracker.save("u1", test.id, 1, _answers("q1"))
        tests._data.pop(test.id)
        with pytest.raises(NotFoundError):
            tracker.get("u1", test.id)
        assert progress.get("u1", test.id) is None

    def test_get_absent(self, env):
        tracker, _, _ = env
        with pytest.raises(NotFoundError):
            tracker.get("u1", "nothing")

    def test_delete_reports_existence(self, env):
        tracker, tests, _ = env
        test = tests.save(_definition())
        tracker.save("u1", test.id, 1, _answers("q1"))
        assert tracker.delete("u1", test.id) is True
        assert tracker.delete("u1", test.id) is False
