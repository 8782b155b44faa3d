"""
Persistent history of completed tests.

Two append-only collections:
  test_history   one HistoryRecord per scored submission (immutable)
  test_answers   one AnswerAuditRecord per question per submission

Storage: in-memory for local runs/tests, Supabase tables in production.
"""

import logging
from typing import Optional

from app.core.config import get_settings
from app.models.history import AnswerAuditRecord, HistoryRecord

logger = logging.getLogger("testcraft.history_store")


class HistoryStore:
    def add(self, record: HistoryRecord) -> HistoryRecord:
        raise NotImplementedError

    def get(self, history_id: str) -> Optional[HistoryRecord]:
        raise NotImplementedError

    def list_user(self, user_id: str) -> list[HistoryRecord]:
        """All records for a user, oldest first."""
        raise NotImplementedError

    def find_by_idempotency_key(self, user_id: str, test_id: str, key: str) -> Optional[HistoryRecord]:
        """The record written for this user, test and submission key, if any."""
        raise NotImplementedError

    def add_answers(self, answers: list[AnswerAuditRecord]) -> None:
        raise NotImplementedError

    def list_answers(self, user_id: str, test_id: str) -> list[AnswerAuditRecord]:
        raise NotImplementedError


class InMemoryHistoryStore(HistoryStore):
    def __init__(self):
        self._history: list[HistoryRecord] = []
        self._answers: list[AnswerAuditRecord] = []

    def add(self, record):
        self._history.append(record)
        return record

    def get(self, history_id):
        return next((h for h in self._history if h.id == history_id), None)

    def list_user(self, user_id):
        return sorted((h for h in self._history if h.user_id == user_id), key=lambda h: h.date)

    def find_by_idempotency_key(self, user_id, test_id, key):
        return next(
            (
                h for h in self._history
                if h.user_id == user_id and h.test_id == test_id and h.idempotency_key == key
            ),
            None,
        )

    def add_answers(self, answers):
        self._answers.extend(answers)

    def list_answers(self, user_id, test_id):
        return [a for a in self._answers if a.user_id == user_id and a.test_id == test_id]


class SupabaseHistoryStore(HistoryStore):
    def __init__(self, supabase_client):
        self.sb = supabase_client

    def add(self, record):
        self.sb.table("test_history").insert(record.model_dump(mode="json")).execute()
        return record

    def get(self, history_id):
        r = self.sb.table("test_history").select("*").eq("id", history_id).maybe_single().execute()
        data = getattr(r, "data", None)
        return HistoryRecord.model_validate(data) if data else None

    def list_user(self, user_id):
        r = (
            self.sb.table("test_history")
            .select("*")
            .eq("user_id", user_id)
            .order("date")
            .execute()
        )
        return [HistoryRecord.model_validate(d) for d in (getattr(r, "data", None) or [])]

    def find_by_idempotency_key(self, user_id, test_id, key):
        r = (
            self.sb.table("test_history")
            .select("*")
            .eq("user_id", user_id)
            .eq("test_id", test_id)
            .eq("idempotency_key", key)
            .limit(1)
            .execute()
        )
        rows = getattr(r, "data", None) or []
        return HistoryRecord.model_validate(rows[0]) if rows else None

    def add_answers(self, answers):
        if not answers:
            return
        self.sb.table("test_answers").insert([a.model_dump(mode="json") for a in answers]).execute()

    def list_answers(self, user_id, test_id):
        r = (
            self.sb.table("test_answers")
            .select("*")
            .eq("user_id", user_id)
            .eq("test_id", test_id)
            .execute()
        )
        return [AnswerAuditRecord.model_validate(d) for d in (getattr(r, "data", None) or [])]


HISTORY_STORE = InMemoryHistoryStore()


def get_history_store() -> HistoryStore:
    if get_settings().store_backend != "supabase":
        return HISTORY_STORE
    from app.core.deps import get_supabase_client
    return SupabaseHistoryStore(get_supabase_client())
