"""Tests API.

POST /api/tests/generate          generate + persist a test, 201 learner view
GET  /api/tests                   tests visible to the caller
GET  /api/tests/mine              tests created by the caller
POST /api/tests/submit            score a submission
GET  /api/tests/{test_id}         learner view (no answers)
GET  /api/tests/{test_id}/answers authoritative review with the caller's answers
"""
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, Field

from app.api.providers import (
    get_generation_service,
    get_scoring_engine,
    get_test_repository,
)
from app.core.deps import Requester, get_current_user
from app.models.history import SubmissionResult, SubmittedAnswer
from app.models.test import LearnerTestView, TestReview, TestSummary
from app.services.scoring import ScoringEngine
from app.services.telemetry import emit_event, instrument
from app.services.test_generator import TestGenerationService, resolve_test_source
from app.services.test_repository import TestRepository

logger = logging.getLogger("testcraft.api.tests")
router = APIRouter(prefix="/api/tests", tags=["tests"])


class GenerateTestRequest(BaseModel):
    topic_id: Optional[str] = None
    custom_topic_name: Optional[str] = None
    custom_topic_description: Optional[str] = None
    difficulty: Optional[str] = None


class SubmitTestRequest(BaseModel):
    test_id: str
    answers: list[SubmittedAnswer] = []
    duration_seconds: int = Field(default=0, ge=0)
    idempotency_key: Optional[str] = None


@router.post("/generate", response_model=LearnerTestView, status_code=201)
@instrument(route="/api/tests/generate")
async def generate_test(
    body: GenerateTestRequest,
    requester: Requester = Depends(get_current_user),
    service: TestGenerationService = Depends(get_generation_service),
):
    source = resolve_test_source(body.topic_id, body.custom_topic_name, body.custom_topic_description)
    service.profile_for(body.difficulty)
    # generation is synchronous and slow (LLM calls); keep it off the event loop
    view = await asyncio.to_thread(service.generate_test, requester, source, body.difficulty)
    emit_event(
        "test_generated", route="/api/tests/generate", user_id=requester.user_id,
        test_id=view.test_id, difficulty=view.difficulty, ok=True,
    )
    return view


@router.get("", response_model=list[TestSummary])
def list_tests(
    requester: Requester = Depends(get_current_user),
    repository: TestRepository = Depends(get_test_repository),
):
    return repository.list_visible(requester)


@router.get("/mine", response_model=list[TestSummary])
def list_my_tests(
    requester: Requester = Depends(get_current_user),
    repository: TestRepository = Depends(get_test_repository),
):
    return repository.list_for_creator(requester.user_id)


@router.post("/submit", response_model=SubmissionResult)
@instrument(route="/api/tests/submit")
def submit_test(
    body: SubmitTestRequest,
    background_tasks: BackgroundTasks,
    requester: Requester = Depends(get_current_user),
    engine: ScoringEngine = Depends(get_scoring_engine),
):
    result = engine.submit(
        requester,
        body.test_id,
        body.answers,
        duration_seconds=body.duration_seconds,
        idempotency_key=body.idempotency_key,
        runner=background_tasks,
    )
    emit_event(
        "test_submitted", route="/api/tests/submit", user_id=requester.user_id,
        test_id=body.test_id, ok=result.history_saved,
    )
    return result


@router.get("/{test_id}", response_model=LearnerTestView)
def fetch_test(
    test_id: str,
    requester: Requester = Depends(get_current_user),
    repository: TestRepository = Depends(get_test_repository),
):
    return repository.get_learner_view(test_id, requester)


@router.get("/{test_id}/answers", response_model=TestReview)
def test_answers(
    test_id: str,
    requester: Requester = Depends(get_current_user),
    engine: ScoringEngine = Depends(get_scoring_engine),
):
    return engine.review(requester, test_id)
