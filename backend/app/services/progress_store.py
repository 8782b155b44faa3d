from datetime import datetime, timezone
from typing import Optional

from app.core.config import get_settings
from app.models.progress import ProgressRecord


class ProgressStore:
    """One row per (user_id, test_id). upsert() overwrites, never duplicates."""

    def get(self, user_id: str, test_id: str) -> Optional[ProgressRecord]:
        raise NotImplementedError

    def upsert(self, record: ProgressRecord) -> ProgressRecord:
        raise NotImplementedError

    def delete(self, user_id: str, test_id: str) -> bool:
        """Remove the row; returns whether one existed."""
        raise NotImplementedError

    def delete_many(self, user_id: str, test_ids: list[str]) -> None:
        raise NotImplementedError

    def list_user(self, user_id: str) -> list[ProgressRecord]:
        raise NotImplementedError


class InMemoryProgressStore(ProgressStore):
    def __init__(self):
        self._data: dict[str, ProgressRecord] = {}

    def _key(self, user_id: str, test_id: str):
        return f"{user_id}::{test_id}"

    def get(self, user_id, test_id):
        return self._data.get(self._key(user_id, test_id))

    def upsert(self, record):
        record.updated_at = datetime.now(timezone.utc)
        self._data[self._key(record.user_id, record.test_id)] = record
        return record

    def delete(self, user_id, test_id):
        return self._data.pop(self._key(user_id, test_id), None) is not None

    def delete_many(self, user_id, test_ids):
        for test_id in test_ids:
            self._data.pop(self._key(user_id, test_id), None)

    def list_user(self, user_id):
        return [r for r in self._data.values() if r.user_id == user_id]


class SupabaseProgressStore(ProgressStore):
    def __init__(self, supabase_client):
        self.sb = supabase_client

    def get(self, user_id, test_id):
        r = (
            self.sb.table("test_progress")
            .select("*")
            .eq("user_id", user_id)
            .eq("test_id", test_id)
            .maybe_single()
            .execute()
        )
        data = getattr(r, "data", None)
        return ProgressRecord.model_validate(data) if data else None

    def upsert(self, record):
        record.updated_at = datetime.now(timezone.utc)
        (
            self.sb.table("test_progress")
            .upsert(record.model_dump(mode="json"), on_conflict="user_id,test_id")
            .execute()
        )
        return record

    def delete(self, user_id, test_id):
        r = (
            self.sb.table("test_progress")
            .delete()
            .eq("user_id", user_id)
            .eq("test_id", test_id)
            .execute()
        )
        return bool(getattr(r, "data", None))

    def delete_many(self, user_id, test_ids):
        if not test_ids:
            return
        (
            self.sb.table("test_progress")
            .delete()
            .eq("user_id", user_id)
            .in_("test_id", test_ids)
            .execute()
        )

    def list_user(self, user_id):
        r = self.sb.table("test_progress").select("*").eq("user_id", user_id).execute()
        return [ProgressRecord.model_validate(d) for d in (getattr(r, "data", None) or [])]


PROGRESS_STORE = InMemoryProgressStore()


def get_progress_store() -> ProgressStore:
    if get_settings().store_backend != "supabase":
        return PROGRESS_STORE
    from app.core.deps import get_supabase_client
    return SupabaseProgressStore(get_supabase_client())
