"""
In-memory repository for tests and local runs.
Nothing persists after the process exits.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from errors import DuplicateEntryError, InsightNotFoundError
from models import BodyMarker, Insight, InsightDraft, JournalEntry
from storage.base import HealthRepository, check_status_transition

log = logging.getLogger("storage.memory")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryRepository(HealthRepository):
    """Dict-backed HealthRepository."""

    def __init__(self):
        self._entries: Dict[str, JournalEntry] = {}
        self._markers: Dict[str, BodyMarker] = {}
        self._insights: Dict[str, Insight] = {}

    def create_entry(self, entry: JournalEntry) -> JournalEntry:
        for existing in self._entries.values():
            if existing.user_id == entry.user_id and existing.entry_date == entry.entry_date:
                raise DuplicateEntryError(
                    f"Entry for {entry.user_id} on {entry.entry_date} already exists"
                )
        stored = entry.model_copy(update={
            "id": entry.id or str(uuid.uuid4()),
            "created_at": entry.created_at or _now(),
        })
        self._entries[stored.id] = stored
        return stored

    def get_all_entries(self, user_id: str) -> List[JournalEntry]:
        rows = [e for e in self._entries.values() if e.user_id == user_id]
        return sorted(rows, key=lambda e: e.entry_date)

    def create_body_marker(self, marker: BodyMarker) -> BodyMarker:
        stored = marker.model_copy(update={
            "id": marker.id or str(uuid.uuid4()),
            "created_at": marker.created_at or _now(),
        })
        self._markers[stored.id] = stored
        return stored

    def get_all_markers(self, user_id: str) -> List[BodyMarker]:
        return [m for m in self._markers.values() if m.user_id == user_id]

    def create_insight(self, draft: InsightDraft) -> Insight:
        insight = Insight(
            **draft.model_dump(),
            id=str(uuid.uuid4()),
            created_at=_now(),
        )
        self._insights[insight.id] = insight
        log.debug("Stored %s insight %s for %s", insight.insight_type, insight.id, insight.user_id)
        return insight

    def get_insight(self, insight_id: str) -> Optional[Insight]:
        return self._insights.get(insight_id)

    def get_insights(self, user_id: str) -> List[Insight]:
        rows = [
            i for i in self._insights.values()
            if i.user_id == user_id and i.status == "active"
        ]
        return sorted(rows, key=lambda i: i.confidence, reverse=True)

    def update_insight_status(self, insight_id: str, status: str) -> Insight:
        insight = self._insights.get(insight_id)
        if insight is None:
            raise InsightNotFoundError(f"Insight {insight_id} not found")
        check_status_transition(insight.status, status)
        updated = insight.model_copy(update={"status": status})
        self._insights[insight_id] = updated
        return updated
