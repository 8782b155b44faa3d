"""Progress API.

POST   /api/progress             save (upsert) progress, or {completed: true}
GET    /api/progress             active sessions (stale rows are cleaned up)
GET    /api/progress/{test_id}   one active session, 404 when absent or stale
DELETE /api/progress/{test_id}   remove a session, 404 when there was none
"""
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.providers import get_progress_tracker
from app.core.deps import Requester, get_current_user
from app.core.errors import NotFoundError
from app.models.progress import AnswerSelection, ProgressCompleted, ProgressRecord, ProgressSummary
from app.services.progress_tracker import ProgressTracker

logger = logging.getLogger("testcraft.api.progress")
router = APIRouter(prefix="/api/progress", tags=["progress"])


class SaveProgressRequest(BaseModel):
    test_id: str
    current_question_index: int = Field(default=0, ge=0)
    answers: list[AnswerSelection] = []
    time_left_seconds: Optional[int] = Field(default=None, ge=0)


@router.post("", response_model=Union[ProgressCompleted, ProgressRecord])
def save_progress(
    body: SaveProgressRequest,
    requester: Requester = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    return tracker.save(
        requester.user_id,
        body.test_id,
        body.current_question_index,
        body.answers,
        body.time_left_seconds,
    )


@router.get("", response_model=list[ProgressSummary])
def list_progress(
    requester: Requester = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    return tracker.list(requester.user_id)


@router.get("/{test_id}", response_model=ProgressRecord)
def get_progress(
    test_id: str,
    requester: Requester = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    return tracker.get(requester.user_id, test_id)


@router.delete("/{test_id}")
def delete_progress(
    test_id: str,
    requester: Requester = Depends(get_current_user),
    tracker: ProgressTracker = Depends(get_progress_tracker),
):
    if not tracker.delete(requester.user_id, test_id):
        raise NotFoundError("Progress", test_id)
    return {"deleted": True, "test_id": test_id}
