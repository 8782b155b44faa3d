"""
Scoring engine: grades a submitted test and records the outcome.

The definition is loaded through the access policy, so a requester who may
not view a test cannot score it. For every question:
  is_correct = submitted selection == correct_option_id
  one AnswerAuditRecord (selected "none" when unanswered)

When the test's topic resolves to a subject a HistoryRecord is written; only
then is the progress row removed and the follow-up jobs (advice, statistics)
queued. Custom-topic tests are scored but leave no history.
"""
from __future__ import annotations

import logging
from typing import Optional

from app.models.history import (
    UNANSWERED,
    AnswerAuditRecord,
    CorrectAnswerInfo,
    HistoryAnswer,
    HistoryRecord,
    SubmissionResult,
    SubmittedAnswer,
)
from app.core.deps import Requester
from app.models.test import ReviewedAnswer, TestDefinition, TestReview
from app.services.background import GENERATE_ADVICE, UPDATE_STATISTICS, BackgroundJobQueue
from app.services.catalog import TopicCatalog
from app.services.history_store import HistoryStore
from app.services.progress_store import ProgressStore
from app.services.test_repository import TestRepository

logger = logging.getLogger(__name__)


def percent(correct: int, total: int) -> int:
    """Whole percent, halves rounded up (7/8 -> 88, 1/8 -> 13)."""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def _correct_answers(test: TestDefinition) -> list[CorrectAnswerInfo]:
    return [
        CorrectAnswerInfo(
            question_id=q.question_id,
            correct_option_id=q.correct_option_id,
            explanation=q.explanation,
            type=q.type,
        )
        for q in test.questions
    ]


class ScoringEngine:
    def __init__(
        self,
        repository: TestRepository,
        topics: TopicCatalog,
        history: HistoryStore,
        progress: ProgressStore,
        jobs: BackgroundJobQueue,
    ):
        self.repository = repository
        self.topics = topics
        self.history = history
        self.progress = progress
        self.jobs = jobs

    def _subject_for(self, test: TestDefinition) -> Optional[str]:
        if not test.topic_id:
            return None
        topic = self.topics.get_topic(test.topic_id)
        return topic.subject_id if topic else None

    def submit(
        self,
        requester: Requester,
        test_id: str,
        answers: list[SubmittedAnswer],
        duration_seconds: int = 0,
        idempotency_key: Optional[str] = None,
        runner=None,
    ) -> SubmissionResult:
        user_id = requester.user_id
        test = self.repository.get_authoritative_view(test_id, requester)
        total = len(test.questions)

        if idempotency_key:
            previous = self.history.find_by_idempotency_key(user_id, test_id, idempotency_key)
            if previous is not None:
                logger.info(
                    "[scoring.submit] duplicate submission key=%s user=%s test=%s",
                    idempotency_key, user_id, test_id,
                )
                return SubmissionResult(
                    score=previous.correct,
                    total=previous.total,
                    percentage=previous.result_percent,
                    correct_answers=_correct_answers(test),
                    history_saved=True,
                )

        selected = {a.question_id: a.selected_option_id for a in answers}
        score = 0
        audit: list[AnswerAuditRecord] = []
        detail: list[HistoryAnswer] = []
        for q in test.questions:
            choice = selected.get(q.question_id)
            is_correct = choice is not None and choice == q.correct_option_id
            if is_correct:
                score += 1
            audit.append(AnswerAuditRecord(
                user_id=user_id,
                test_id=test_id,
                question_id=q.question_id,
                selected_option_id=choice or UNANSWERED,
                is_correct=is_correct,
            ))
            detail.append(HistoryAnswer(
                question_id=q.question_id,
                correct_option_id=q.correct_option_id,
                selected_option_id=choice or UNANSWERED,
                explanation=q.explanation,
            ))
        self.history.add_answers(audit)
        result_percent = percent(score, total)

        history_saved = False
        history_error = None
        try:
            subject_id = self._subject_for(test)
            if subject_id:
                record = self.history.add(HistoryRecord(
                    user_id=user_id,
                    subject_id=subject_id,
                    test_id=test_id,
                    topic_id=test.topic_id,
                    difficulty=test.difficulty,
                    result_percent=result_percent,
                    correct=score,
                    total=total,
                    duration_seconds=duration_seconds or 0,
                    answers=detail,
                    idempotency_key=idempotency_key,
                ))
                history_saved = True
                self.progress.delete(user_id, test_id)
                self.jobs.enqueue(
                    GENERATE_ADVICE, {"user_id": user_id, "history_id": record.id}, runner
                )
                self.jobs.enqueue(UPDATE_STATISTICS, {"user_id": user_id}, runner)
            else:
                logger.info("[scoring.submit] test=%s has no subject; history not recorded", test_id)
        except Exception as e:
            history_error = str(e) or "Failed to save test history"
            logger.error("[scoring.submit] history write failed for test=%s: %s", test_id, e, exc_info=True)

        logger.info(
            "[scoring.submit] user=%s test=%s score=%d/%d history_saved=%s",
            user_id, test_id, score, total, history_saved,
        )
        return SubmissionResult(
            score=score,
            total=total,
            percentage=result_percent,
            correct_answers=_correct_answers(test),
            history_saved=history_saved,
            history_error=history_error,
        )

    def review(self, requester: Requester, test_id: str) -> TestReview:
        """The authoritative test merged with the requester's latest recorded answers."""
        test = self.repository.get_authoritative_view(test_id, requester)
        latest: dict[str, AnswerAuditRecord] = {}
        for a in sorted(self.history.list_answers(requester.user_id, test_id), key=lambda a: a.created_at):
            latest[a.question_id] = a

        reviewed = []
        for q in test.questions:
            audit = latest.get(q.question_id)
            answered = audit is not None and audit.selected_option_id != UNANSWERED
            reviewed.append(ReviewedAnswer(
                question_id=q.question_id,
                question_text=q.text,
                options=q.options,
                correct_option_id=q.correct_option_id,
                selected_option_id=audit.selected_option_id if answered else None,
                is_correct=bool(audit and audit.is_correct),
                explanation=q.explanation,
                type=q.type,
            ))
        return TestReview(
            test_id=test.id,
            title=test.title,
            difficulty=test.difficulty,
            total_questions=len(test.questions),
            subject_id=self._subject_for(test),
            answers=reviewed,
        )
