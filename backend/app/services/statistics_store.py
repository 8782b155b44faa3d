from typing import Optional

from app.core.config import get_settings
from app.models.statistics import AdviceRecord, UserStatisticsSnapshot


class StatisticsStore:
    """One statistics snapshot and one advice record per user, both replaced wholesale."""

    def get_snapshot(self, user_id: str) -> Optional[UserStatisticsSnapshot]:
        raise NotImplementedError

    def put_snapshot(self, snapshot: UserStatisticsSnapshot) -> UserStatisticsSnapshot:
        raise NotImplementedError

    def get_advice(self, user_id: str) -> Optional[AdviceRecord]:
        raise NotImplementedError

    def put_advice(self, advice: AdviceRecord) -> AdviceRecord:
        raise NotImplementedError


class InMemoryStatisticsStore(StatisticsStore):
    def __init__(self):
        self._snapshots: dict[str, UserStatisticsSnapshot] = {}
        self._advice: dict[str, AdviceRecord] = {}

    def get_snapshot(self, user_id):
        return self._snapshots.get(user_id)

    def put_snapshot(self, snapshot):
        self._snapshots[snapshot.user_id] = snapshot
        return snapshot

    def get_advice(self, user_id):
        return self._advice.get(user_id)

    def put_advice(self, advice):
        self._advice[advice.user_id] = advice
        return advice


class SupabaseStatisticsStore(StatisticsStore):
    def __init__(self, supabase_client):
        self.sb = supabase_client

    def get_snapshot(self, user_id):
        r = (
            self.sb.table("user_statistics")
            .select("*")
            .eq("user_id", user_id)
            .maybe_single()
            .execute()
        )
        data = getattr(r, "data", None)
        return UserStatisticsSnapshot.model_validate(data) if data else None

    def put_snapshot(self, snapshot):
        (
            self.sb.table("user_statistics")
            .upsert(snapshot.model_dump(mode="json"), on_conflict="user_id")
            .execute()
        )
        return snapshot

    def get_advice(self, user_id):
        r = self.sb.table("advice").select("*").eq("user_id", user_id).maybe_single().execute()
        data = getattr(r, "data", None)
        return AdviceRecord.model_validate(data) if data else None

    def put_advice(self, advice):
        self.sb.table("advice").upsert(advice.model_dump(mode="json"), on_conflict="user_id").execute()
        return advice


STATISTICS_STORE = InMemoryStatisticsStore()


def get_statistics_store() -> StatisticsStore:
    if get_settings().store_backend != "supabase":
        return STATISTICS_STORE
    from app.core.deps import get_supabase_client
    return SupabaseStatisticsStore(get_supabase_client())
