import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field

UNANSWERED = "none"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnswerAuditRecord(BaseModel):
    user_id: str
    test_id: str
    question_id: str
    selected_option_id: str
    is_correct: bool
    created_at: datetime = Field(default_factory=_utcnow)


class HistoryAnswer(BaseModel):
    question_id: str
    correct_option_id: str
    selected_option_id: str
    explanation: str = ""


class HistoryRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    subject_id: str
    test_id: str
    topic_id: str | None = None
    date: datetime = Field(default_factory=_utcnow)
    difficulty: str
    result_percent: int
    correct: int
    total: int
    duration_seconds: int = 0
    answers: list[HistoryAnswer] = []
    idempotency_key: str | None = None


class SubmittedAnswer(BaseModel):
    question_id: str
    selected_option_id: str


class CorrectAnswerInfo(BaseModel):
    question_id: str
    correct_option_id: str
    explanation: str = ""
    type: str | None = None


class SubmissionResult(BaseModel):
    score: int
    total: int
    percentage: int
    correct_answers: list[CorrectAnswerInfo]
    history_saved: bool
    history_error: str | None = None
    test_completed: bool = True
