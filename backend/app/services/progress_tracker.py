"""
Progress tracker: resumable in-progress test sessions.

  no-progress ──save──▶ in-progress ──save (all answered)──▶ completed
                                                          (record deleted)

Reads clean up after themselves: a record whose test disappeared, has no
questions, is fully answered or was marked completed is deleted before the
surviving records are projected.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable

from app.core.errors import NotFoundError
from app.models.progress import (
    AnswerSelection,
    ProgressCompleted,
    ProgressRecord,
    ProgressSummary,
)
from app.models.test import TestDefinition
from app.services.progress_store import ProgressStore, get_progress_store
from app.services.test_repository import TestRepository

logger = logging.getLogger(__name__)

STALE_MISSING_TEST = "missing_test"
STALE_EMPTY_TEST = "empty_test"
STALE_FULLY_ANSWERED = "fully_answered"
STALE_COMPLETED = "completed"


def progress_percent(answered: int, total: int) -> int:
    if total <= 0:
        return 0
    return math.floor(answered * 100 / total)


def find_stale(record: ProgressRecord, test: TestDefinition | None) -> str | None:
    """Return why `record` is stale, or None when it is still a live session."""
    if test is None:
        return STALE_MISSING_TEST
    total = len(test.questions)
    if total == 0:
        return STALE_EMPTY_TEST
    if len(record.answers) >= total:
        return STALE_FULLY_ANSWERED
    if record.status == "completed":
        return STALE_COMPLETED
    return None


class ProgressTracker:
    def __init__(self, repository: TestRepository, store: ProgressStore | None = None):
        self.repository = repository
        self.store = store or get_progress_store()

    def purge_stale(
        self, user_id: str, records: Iterable[ProgressRecord]
    ) -> list[tuple[ProgressRecord, TestDefinition]]:
        """Delete stale records and return the live ones paired with their tests."""
        live: list[tuple[ProgressRecord, TestDefinition]] = []
        stale_ids: list[str] = []
        for record in records:
            test = self.repository.find(record.test_id)
            reason = find_stale(record, test)
            if reason:
                logger.info(
                    "[progress_tracker] dropping stale progress user=%s test=%s reason=%s",
                    user_id, record.test_id, reason,
                )
                stale_ids.append(record.test_id)
            else:
                live.append((record, test))
        if stale_ids:
            self.store.delete_many(user_id, stale_ids)
        return live

    def save(
        self,
        user_id: str,
        test_id: str,
        current_question_index: int,
        answers: list[AnswerSelection],
        time_left_seconds: int | None = None,
    ) -> ProgressRecord | ProgressCompleted:
        test = self.repository.get_definition(test_id)
        record = ProgressRecord(
            user_id=user_id,
            test_id=test_id,
            current_question_index=current_question_index,
            answers=answers,
            time_left_seconds=time_left_seconds,
        )
        if len(record.answers) >= len(test.questions):
            self.store.delete(user_id, test_id)
            logger.info("[progress_tracker] test=%s fully answered by user=%s", test_id, user_id)
            return ProgressCompleted()
        return self.store.upsert(record)

    def list(self, user_id: str) -> list[ProgressSummary]:
        live = self.purge_stale(user_id, self.store.list_user(user_id))
        return [self._summarize(record, test) for record, test in live]

    def get(self, user_id: str, test_id: str) -> ProgressRecord:
        record = self.store.get(user_id, test_id)
        if record is None or not self.purge_stale(user_id, [record]):
            raise NotFoundError("Progress", test_id)
        return record

    def delete(self, user_id: str, test_id: str) -> bool:
        existed = self.store.delete(user_id, test_id)
        if not existed:
            logger.debug("[progress_tracker] no progress to delete user=%s test=%s", user_id, test_id)
        return existed

    @staticmethod
    def _summarize(record: ProgressRecord, test: TestDefinition) -> ProgressSummary:
        return ProgressSummary(
            test_id=record.test_id,
            title=test.title,
            progress_percent=progress_percent(len(record.answers), len(test.questions)),
            time_left_seconds=record.time_left_seconds,
            current_question_index=record.current_question_index,
            status=record.status,
        )
