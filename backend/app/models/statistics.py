from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrendPoint(BaseModel):
    date: datetime
    score: int


class SubjectStats(BaseModel):
    subject_id: str
    total_tests: int = 0
    total_questions: int = 0
    correct_answers: int = 0
    average_score: int = 0
    last_test_date: datetime | None = None
    progress_trend: list[TrendPoint] = []


class WeakTopic(BaseModel):
    topic_id: str
    subject_id: str
    average_score: int
    test_count: int
    last_test_date: datetime | None = None


class Recommendation(BaseModel):
    type: Literal["test", "topic"]
    target_id: str
    reason: str
    priority: int = 1


class UserStatisticsSnapshot(BaseModel):
    user_id: str
    subject_stats: list[SubjectStats] = []
    weak_topics: list[WeakTopic] = []
    recommendations: list[Recommendation] = []
    last_updated: datetime = Field(default_factory=_utcnow)


class AdviceRecord(BaseModel):
    user_id: str
    advice_text: str
    created_at: datetime = Field(default_factory=_utcnow)
