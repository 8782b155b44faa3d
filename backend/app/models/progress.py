from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class AnswerSelection(BaseModel):
    question_id: str
    selected_option_id: str


class ProgressRecord(BaseModel):
    user_id: str
    test_id: str
    current_question_index: int = 0
    answers: list[AnswerSelection] = []
    time_left_seconds: int | None = None
    status: Literal["in_progress", "completed"] = "in_progress"
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("answers")
    @classmethod
    def _unique_by_question(cls, v: list[AnswerSelection]) -> list[AnswerSelection]:
        # later selections for the same question replace earlier ones
        by_question: dict[str, AnswerSelection] = {}
        for a in v:
            by_question.pop(a.question_id, None)
            by_question[a.question_id] = a
        return list(by_question.values())


class ProgressCompleted(BaseModel):
    status: Literal["completed"] = "completed"
    completed: bool = True
    message: str = "Test finished, progress removed"


class ProgressSummary(BaseModel):
    test_id: str
    title: str
    progress_percent: int
    time_left_seconds: int | None = None
    current_question_index: int
    status: str
