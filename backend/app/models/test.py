import uuid
from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, model_validator

OPTION_IDS = ("a", "b", "c", "d")


class OptionRecord(BaseModel):
    option_id: Literal["a", "b", "c", "d"]
    text: str = Field(min_length=1)


class QuestionRecord(BaseModel):
    question_id: str
    text: str
    options: list[OptionRecord]
    correct_option_id: str
    explanation: str = ""
    type: str | None = None

    @model_validator(mode="after")
    def _check_options(self):
        if len(self.options) != 4:
            raise ValueError(f"{self.question_id}: expected 4 options, got {len(self.options)}")
        ids = [o.option_id for o in self.options]
        if len(set(ids)) != 4:
            raise ValueError(f"{self.question_id}: option ids must be unique")
        if len({o.text.strip().lower() for o in self.options}) != 4:
            raise ValueError(f"{self.question_id}: option texts must be unique")
        if self.correct_option_id not in ids:
            raise ValueError(
                f"{self.question_id}: correct option '{self.correct_option_id}' is not one of {ids}"
            )
        return self


# ──────────────────────────────────────────────
# Test source: a catalog topic or a user-described topic
# ──────────────────────────────────────────────

class ByTopic(BaseModel):
    kind: Literal["topic"] = "topic"
    topic_id: str


class ByCustomTopic(BaseModel):
    kind: Literal["custom"] = "custom"
    name: str = Field(min_length=1)
    description: str = ""


TestSource = Annotated[Union[ByTopic, ByCustomTopic], Field(discriminator="kind")]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TestDefinition(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    source: TestSource
    difficulty: str
    questions: list[QuestionRecord]
    time_limit_seconds: int
    created_by: str
    creator_role: str = "user"
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def topic_id(self) -> str | None:
        return self.source.topic_id if isinstance(self.source, ByTopic) else None

    @property
    def custom_topic(self) -> ByCustomTopic | None:
        return self.source if isinstance(self.source, ByCustomTopic) else None


# ──────────────────────────────────────────────
# Projections
# ──────────────────────────────────────────────

class LearnerQuestion(BaseModel):
    question_id: str
    text: str
    options: list[OptionRecord]


class LearnerTestView(BaseModel):
    """A test with correct answers and explanations stripped."""
    test_id: str
    title: str
    difficulty: str
    time_limit_seconds: int
    question_count: int
    topic_id: str | None = None
    custom_topic_name: str | None = None
    custom_topic_description: str | None = None
    questions: list[LearnerQuestion]


class TestSummary(BaseModel):
    test_id: str
    title: str
    difficulty: str
    question_count: int
    time_limit_seconds: int
    topic_id: str | None = None
    custom_topic_name: str | None = None
    created_by: str


class ReviewedAnswer(BaseModel):
    question_id: str
    question_text: str
    options: list[OptionRecord]
    correct_option_id: str
    selected_option_id: str | None = None
    is_correct: bool = False
    explanation: str = ""
    type: str | None = None


class TestReview(BaseModel):
    """Authoritative view merged with one learner's recorded answers."""
    test_id: str
    title: str
    difficulty: str
    total_questions: int
    subject_id: str | None = None
    answers: list[ReviewedAnswer]
