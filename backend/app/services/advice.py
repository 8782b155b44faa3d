"""
Advice generator: free-text study advice after each recorded test.

The prompt combines the last five results (trend) with a question-by-question
breakdown of the latest test. The generated text replaces the user's previous
advice record.
"""
from __future__ import annotations

import logging

from app.core.errors import NotFoundError
from app.models.history import UNANSWERED, HistoryRecord
from app.models.statistics import AdviceRecord
from app.prompts.test_generation import ADVICE_PROMPT
from app.services.history_store import HistoryStore
from app.services.statistics_store import StatisticsStore
from app.services.test_repository import TestRepository

logger = logging.getLogger(__name__)

RECENT_RESULTS = 5


def history_block(records: list[HistoryRecord]) -> str:
    if not records:
        return ""
    lines = ["Recent results:", ""]
    for h in records:
        lines.append("---")
        lines.append(f"Subject: {h.subject_id}, Level: {h.difficulty}")
        lines.append(f"Date: {h.date:%Y-%m-%d}")
        lines.append(f"Result: {h.result_percent}% ({h.correct} of {h.total})")
    lines.append("---")
    return "\n".join(lines) + "\n"


def detail_block(title: str, record: HistoryRecord, question_texts: dict[str, str]) -> str:
    out = [f'Breakdown of the latest test ("{title}"):', ""]
    for a in record.answers:
        out.append(f"Question: {question_texts.get(a.question_id, a.question_id)}")
        out.append(f"Correct answer: {a.correct_option_id}")
        if a.selected_option_id == UNANSWERED:
            out.append("Learner's answer: not answered")
        else:
            verdict = "correct" if a.selected_option_id == a.correct_option_id else "wrong"
            out.append(f"Learner's answer: {a.selected_option_id} ({verdict})")
        if a.explanation:
            out.append(f"Explanation: {a.explanation}")
        out.append("")
    return "\n".join(out)


class AdviceGenerator:
    def __init__(self, ai, history: HistoryStore, store: StatisticsStore, repository: TestRepository):
        self.ai = ai
        self.history = history
        self.store = store
        self.repository = repository

    def build_prompt(self, user_id: str, latest: HistoryRecord) -> str:
        recent = list(reversed(self.history.list_user(user_id)))[:RECENT_RESULTS]
        test = self.repository.find(latest.test_id)
        detail = ""
        if test is not None:
            texts = {q.question_id: q.text for q in test.questions}
            detail = detail_block(test.title, latest, texts)
        return ADVICE_PROMPT.format(history_block=history_block(recent), detail_block=detail)

    def generate(self, user_id: str, history_id: str) -> AdviceRecord:
        latest = self.history.get(history_id)
        if latest is None or latest.user_id != user_id:
            raise NotFoundError("History", history_id)
        text = self.ai.generate(self.build_prompt(user_id, latest)).strip()
        advice = self.store.put_advice(AdviceRecord(user_id=user_id, advice_text=text))
        logger.info("[advice.generate] user=%s history=%s chars=%d", user_id, history_id, len(text))
        return advice
