"""
Topic catalog: read-only view of subjects, subsections and topics.

Topic/subject CRUD lives elsewhere; the engine only needs to resolve a topic
to its name and subject, fetch its reference material, and list topics of a
subject for recommendations.
"""
import logging
from typing import Optional

from pydantic import BaseModel

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class TopicInfo(BaseModel):
    id: str
    name: str
    subject_id: str | None = None
    description: str = ""


class TopicCatalog:
    def get_topic(self, topic_id: str) -> Optional[TopicInfo]:
        raise NotImplementedError

    def reference_material(self, topic_id: str) -> str:
        raise NotImplementedError

    def topics_for_subject(self, subject_id: str, limit: int = 3) -> list[TopicInfo]:
        raise NotImplementedError


class InMemoryTopicCatalog(TopicCatalog):
    def __init__(self):
        self._topics: dict[str, TopicInfo] = {}
        self._materials: dict[str, str] = {}

    def add_topic(self, topic: TopicInfo, material: str = "") -> TopicInfo:
        self._topics[topic.id] = topic
        if material:
            self._materials[topic.id] = material
        return topic

    def get_topic(self, topic_id):
        return self._topics.get(topic_id)

    def reference_material(self, topic_id):
        return self._materials.get(topic_id, "")

    def topics_for_subject(self, subject_id, limit=3):
        return [t for t in self._topics.values() if t.subject_id == subject_id][:limit]


class SupabaseTopicCatalog(TopicCatalog):
    """topics(id, name, description, subsection_id) → subsections(id, subject_id);
    reference texts in ort_samples(topic_id, content)."""

    def __init__(self, supabase_client):
        self.sb = supabase_client

    def get_topic(self, topic_id):
        r = self.sb.table("topics").select("*").eq("id", topic_id).maybe_single().execute()
        row = getattr(r, "data", None)
        if not row:
            return None
        subject_id = None
        if row.get("subsection_id"):
            s = (
                self.sb.table("subsections")
                .select("subject_id")
                .eq("id", row["subsection_id"])
                .maybe_single()
                .execute()
            )
            subject_id = (getattr(s, "data", None) or {}).get("subject_id")
        return TopicInfo(
            id=str(row["id"]),
            name=row["name"],
            subject_id=str(subject_id) if subject_id else None,
            description=row.get("description") or "",
        )

    def reference_material(self, topic_id):
        r = (
            self.sb.table("ort_samples")
            .select("content")
            .eq("topic_id", topic_id)
            .limit(1)
            .execute()
        )
        rows = getattr(r, "data", None) or []
        return (rows[0].get("content") or "") if rows else ""

    def topics_for_subject(self, subject_id, limit=3):
        s = self.sb.table("subsections").select("id").eq("subject_id", subject_id).execute()
        subsection_ids = [row["id"] for row in (getattr(s, "data", None) or [])]
        if not subsection_ids:
            return []
        r = (
            self.sb.table("topics")
            .select("id, name, description")
            .in_("subsection_id", subsection_ids)
            .limit(limit)
            .execute()
        )
        return [
            TopicInfo(id=str(row["id"]), name=row["name"], subject_id=subject_id,
                      description=row.get("description") or "")
            for row in (getattr(r, "data", None) or [])
        ]


TOPIC_CATALOG = InMemoryTopicCatalog()


def get_topic_catalog() -> TopicCatalog:
    if get_settings().store_backend != "supabase":
        return TOPIC_CATALOG
    from app.core.deps import get_supabase_client
    return SupabaseTopicCatalog(get_supabase_client())
