"""
Repository interface the insight engine reads from and writes to.

The engine only ever sees a HealthRepository. Which database sits behind
it (in-memory dicts for tests and local runs, PostgreSQL in production)
is decided by storage.get_repository().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from constants import INSIGHT_STATUSES, STATUS_TRANSITIONS
from errors import InvalidStatusTransitionError
from models import BodyMarker, Insight, InsightDraft, JournalEntry


def check_status_transition(current: str, requested: str) -> None:
    """Raise unless an insight may move from *current* to *requested*."""
    if requested not in INSIGHT_STATUSES:
        raise ValueError(f"Unknown insight status: {requested}")
    if requested not in STATUS_TRANSITIONS.get(current, set()):
        raise InvalidStatusTransitionError(current, requested)


class HealthRepository(ABC):
    """CRUD surface for journal entries, body markers and insights."""

    # ─── Entries ───────────────────────────────────────────

    @abstractmethod
    def create_entry(self, entry: JournalEntry) -> JournalEntry:
        """Store an entry; at most one per (user_id, entry_date)."""

    @abstractmethod
    def get_all_entries(self, user_id: str) -> List[JournalEntry]:
        """All of a user's entries, oldest entry_date first."""

    # ─── Body markers ──────────────────────────────────────

    @abstractmethod
    def create_body_marker(self, marker: BodyMarker) -> BodyMarker:
        ...

    @abstractmethod
    def get_all_markers(self, user_id: str) -> List[BodyMarker]:
        """Every marker the user has ever logged, in no particular order."""

    # ─── Insights ──────────────────────────────────────────

    @abstractmethod
    def create_insight(self, draft: InsightDraft) -> Insight:
        """Persist a draft, assigning id and created_at."""

    @abstractmethod
    def get_insight(self, insight_id: str) -> Optional[Insight]:
        ...

    @abstractmethod
    def get_insights(self, user_id: str) -> List[Insight]:
        """Active insights for the user, highest confidence first."""

    @abstractmethod
    def update_insight_status(self, insight_id: str, status: str) -> Insight:
        """Move an insight to *status*, enforcing STATUS_TRANSITIONS."""

    def ping(self) -> bool:
        """Cheap liveness check used by the health-check route."""
        return True
