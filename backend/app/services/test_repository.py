"""
Test repository: persisted test definitions and their projections.

  learner view        questions + options only (no answers, no explanations)
  authoritative view  the full record, gated by the access policy

No business logic beyond projection; generation and scoring live elsewhere.
"""
from __future__ import annotations

import logging

from app.core.deps import ADMIN_ROLE, Requester
from app.core.errors import AccessDeniedError, NotFoundError
from app.models.test import LearnerQuestion, LearnerTestView, TestDefinition, TestSummary
from app.services.test_store import TestStore, get_test_store

logger = logging.getLogger(__name__)


class AccessPolicy:
    """Admins see every test; others see their own tests and tests published by admins."""

    def can_view(self, requester: Requester, test: TestDefinition) -> bool:
        return (
            requester.is_admin
            or test.created_by == requester.user_id
            or test.creator_role == ADMIN_ROLE
        )


def to_learner_view(test: TestDefinition) -> LearnerTestView:
    custom = test.custom_topic
    return LearnerTestView(
        test_id=test.id,
        title=test.title,
        difficulty=test.difficulty,
        time_limit_seconds=test.time_limit_seconds,
        question_count=len(test.questions),
        topic_id=test.topic_id,
        custom_topic_name=custom.name if custom else None,
        custom_topic_description=custom.description if custom else None,
        questions=[
            LearnerQuestion(question_id=q.question_id, text=q.text, options=q.options)
            for q in test.questions
        ],
    )


def to_summary(test: TestDefinition) -> TestSummary:
    custom = test.custom_topic
    return TestSummary(
        test_id=test.id,
        title=test.title,
        difficulty=test.difficulty,
        question_count=len(test.questions),
        time_limit_seconds=test.time_limit_seconds,
        topic_id=test.topic_id,
        custom_topic_name=custom.name if custom else None,
        created_by=test.created_by,
    )


class TestRepository:
    def __init__(self, store: TestStore | None = None, policy: AccessPolicy | None = None):
        self.store = store or get_test_store()
        self.policy = policy or AccessPolicy()

    def create(self, definition: TestDefinition) -> TestDefinition:
        saved = self.store.save(definition)
        logger.info(
            "[test_repository] created test=%s questions=%d by=%s",
            saved.id, len(saved.questions), saved.created_by,
        )
        return saved

    def find(self, test_id: str) -> TestDefinition | None:
        return self.store.get(test_id)

    def get_definition(self, test_id: str) -> TestDefinition:
        """Unchecked authoritative read for engine-internal use (scoring, progress)."""
        test = self.store.get(test_id)
        if test is None:
            raise NotFoundError("Test", test_id)
        return test

    def _checked(self, test_id: str, requester: Requester | None) -> TestDefinition:
        test = self.get_definition(test_id)
        if requester is not None and not self.policy.can_view(requester, test):
            raise AccessDeniedError("You do not have permission to view this test")
        return test

    def get_learner_view(self, test_id: str, requester: Requester | None = None) -> LearnerTestView:
        return to_learner_view(self._checked(test_id, requester))

    def get_authoritative_view(self, test_id: str, requester: Requester) -> TestDefinition:
        return self._checked(test_id, requester)

    def list_for_creator(self, user_id: str) -> list[TestSummary]:
        return [to_summary(t) for t in self.store.list_by_creator(user_id)]

    def list_visible(self, requester: Requester) -> list[TestSummary]:
        if requester.is_admin:
            tests = self.store.list_all()
        else:
            merged = {t.id: t for t in self.store.list_by_creator_role(ADMIN_ROLE)}
            merged.update({t.id: t for t in self.store.list_by_creator(requester.user_id)})
            tests = sorted(merged.values(), key=lambda t: t.created_at, reverse=True)
        return [to_summary(t) for t in tests]

    def recent_for_topic(self, topic_id: str, limit: int = 3) -> list[TestDefinition]:
        return self.store.recent_for_topic(topic_id, limit)
