"""
Statistics aggregator: per-user learning analytics recomputed from history.

  subject_stats    totals per subject, average = round(sum correct / sum total)
  weak_topics      topics averaging < 60% (mean of result percents),
                   weakest first, at most 5
  recommendations  recent tests for the 3 weakest topics (priority 1), then
                   topics of subjects averaging < 70% (priority 2), at most 10

The snapshot is rebuilt and overwritten on every recompute(); the same
history always produces the same snapshot apart from last_updated.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Optional

from app.core.errors import NotFoundError
from app.models.history import HistoryRecord
from app.models.statistics import (
    Recommendation,
    SubjectStats,
    TrendPoint,
    UserStatisticsSnapshot,
    WeakTopic,
)
from app.services.catalog import TopicCatalog
from app.services.history_store import HistoryStore
from app.services.scoring import percent
from app.services.statistics_store import StatisticsStore
from app.services.test_repository import TestRepository

logger = logging.getLogger(__name__)

WEAK_TOPIC_THRESHOLD = 60
WEAK_SUBJECT_THRESHOLD = 70
MAX_WEAK_TOPICS = 5
WEAK_TOPICS_TO_RECOMMEND = 3
WEAK_SUBJECTS_TO_RECOMMEND = 2
ITEMS_PER_TARGET = 3
MAX_RECOMMENDATIONS = 10


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def subject_stats(history: list[HistoryRecord]) -> list[SubjectStats]:
    groups: "OrderedDict[str, list[HistoryRecord]]" = OrderedDict()
    for h in sorted(history, key=lambda h: h.date):
        groups.setdefault(h.subject_id, []).append(h)

    stats = []
    for subject_id, records in groups.items():
        total_questions = sum(h.total for h in records)
        correct = sum(h.correct for h in records)
        stats.append(SubjectStats(
            subject_id=subject_id,
            total_tests=len(records),
            total_questions=total_questions,
            correct_answers=correct,
            average_score=percent(correct, total_questions),
            last_test_date=records[-1].date,
            progress_trend=[TrendPoint(date=h.date, score=h.result_percent) for h in records],
        ))
    return stats


def weak_topics(history: list[HistoryRecord]) -> list[WeakTopic]:
    groups: "OrderedDict[str, list[HistoryRecord]]" = OrderedDict()
    for h in sorted(history, key=lambda h: h.date):
        if h.topic_id:
            groups.setdefault(h.topic_id, []).append(h)

    weak = []
    for topic_id, records in groups.items():
        mean = sum(h.result_percent for h in records) / len(records)
        if mean >= WEAK_TOPIC_THRESHOLD:
            continue
        weak.append(WeakTopic(
            topic_id=topic_id,
            subject_id=records[-1].subject_id,
            average_score=_round_half_up(mean),
            test_count=len(records),
            last_test_date=records[-1].date,
        ))
    weak.sort(key=lambda w: w.average_score)
    return weak[:MAX_WEAK_TOPICS]


class StatisticsAggregator:
    def __init__(
        self,
        history: HistoryStore,
        store: StatisticsStore,
        repository: TestRepository,
        topics: TopicCatalog,
    ):
        self.history = history
        self.store = store
        self.repository = repository
        self.topics = topics

    def _topic_name(self, topic_id: str) -> str:
        topic = self.topics.get_topic(topic_id)
        return topic.name if topic else topic_id

    def build_recommendations(
        self, weak: list[WeakTopic], subjects: list[SubjectStats]
    ) -> list[Recommendation]:
        recs: list[Recommendation] = []

        for w in weak[:WEAK_TOPICS_TO_RECOMMEND]:
            name = self._topic_name(w.topic_id)
            for test in self.repository.recent_for_topic(w.topic_id, ITEMS_PER_TARGET):
                recs.append(Recommendation(
                    type="test",
                    target_id=test.id,
                    reason=f'Review the topic "{name}": your average score is {w.average_score}%',
                    priority=1,
                ))

        low = [s for s in subjects if s.average_score < WEAK_SUBJECT_THRESHOLD]
        for s in low[:WEAK_SUBJECTS_TO_RECOMMEND]:
            for topic in self.topics.topics_for_subject(s.subject_id, ITEMS_PER_TARGET):
                recs.append(Recommendation(
                    type="topic",
                    target_id=topic.id,
                    reason=f"Strengthen this subject: your average score is {s.average_score}%",
                    priority=2,
                ))

        return recs[:MAX_RECOMMENDATIONS]

    def recompute(self, user_id: str) -> UserStatisticsSnapshot:
        history = self.history.list_user(user_id)
        if not history:
            snapshot = UserStatisticsSnapshot(user_id=user_id)
        else:
            subjects = subject_stats(history)
            weak = weak_topics(history)
            snapshot = UserStatisticsSnapshot(
                user_id=user_id,
                subject_stats=subjects,
                weak_topics=weak,
                recommendations=self.build_recommendations(weak, subjects),
            )
        self.store.put_snapshot(snapshot)
        logger.info(
            "[statistics.recompute] user=%s tests=%d subjects=%d weak_topics=%d recommendations=%d",
            user_id, len(history), len(snapshot.subject_stats),
            len(snapshot.weak_topics), len(snapshot.recommendations),
        )
        return snapshot

    def snapshot(self, user_id: str) -> UserStatisticsSnapshot:
        existing = self.store.get_snapshot(user_id)
        return existing if existing is not None else self.recompute(user_id)

    def progress_trend(self, user_id: str, subject_id: Optional[str] = None) -> list[TrendPoint]:
        snap = self.snapshot(user_id)
        if subject_id:
            stat = next((s for s in snap.subject_stats if s.subject_id == subject_id), None)
            if stat is None:
                raise NotFoundError("Subject statistics", subject_id)
            return list(stat.progress_trend)

        by_day: dict[str, list[int]] = {}
        for stat in snap.subject_stats:
            for point in stat.progress_trend:
                by_day.setdefault(point.date.date().isoformat(), []).append(point.score)
        return [
            TrendPoint(
                date=datetime.fromisoformat(day).replace(tzinfo=timezone.utc),
                score=_round_half_up(sum(scores) / len(scores)),
            )
            for day, scores in sorted(by_day.items())
        ]

    def recommendations(self, user_id: str) -> list[Recommendation]:
        return self.snapshot(user_id).recommendations
