"""
PostgreSQL repository.

Tables:
  - journal_entries   (one row per user per day)
  - body_markers      (symptoms placed on the body map, many per entry)
  - insights          (engine output; status changed only by feedback)

Every driver error is re-raised as StorageError so the engine and the
API never need to know about psycopg2.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import psycopg2
from psycopg2 import errors as pg_errors
from psycopg2.extras import Json, RealDictCursor

from config import get_conn_str
from errors import DuplicateEntryError, InsightNotFoundError, StorageError
from models import BodyMarker, Insight, InsightDraft, JournalEntry
from storage.base import HealthRepository, check_status_transition

log = logging.getLogger("storage.postgres")


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS journal_entries (
    id              UUID PRIMARY KEY,
    user_id         TEXT NOT NULL,
    entry_date      TEXT NOT NULL,          -- YYYY-MM-DD
    sleep_hours     NUMERIC(3,1),
    sleep_quality   INTEGER,
    stress_level    INTEGER,
    energy_level    INTEGER,
    mood_score      INTEGER,
    exercise_mins   INTEGER,
    exercise_type   TEXT,
    water_intake_ml INTEGER,
    notes           TEXT,
    weather_temp    NUMERIC(4,1),
    weather_cond    TEXT,
    created_at      TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (user_id, entry_date)
);

CREATE INDEX IF NOT EXISTS idx_journal_entries_user_date
    ON journal_entries(user_id, entry_date);

CREATE TABLE IF NOT EXISTS body_markers (
    id          UUID PRIMARY KEY,
    entry_id    UUID NOT NULL REFERENCES journal_entries(id) ON DELETE CASCADE,
    user_id     TEXT NOT NULL,
    body_region TEXT NOT NULL,
    x_pos       NUMERIC(5,2) NOT NULL,      -- 0-100
    y_pos       NUMERIC(5,2) NOT NULL,      -- 0-100
    symptom     TEXT NOT NULL,
    intensity   INTEGER NOT NULL,           -- 1-10
    created_at  TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_body_markers_user ON body_markers(user_id);

CREATE TABLE IF NOT EXISTS insights (
    id              UUID PRIMARY KEY,
    user_id         TEXT NOT NULL,
    insight_type    TEXT NOT NULL,
    title           TEXT NOT NULL,
    description     TEXT NOT NULL,
    confidence      NUMERIC(3,2) NOT NULL,
    factors         JSONB NOT NULL,
    supporting_data JSONB,
    status          TEXT NOT NULL DEFAULT 'active',
    created_at      TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_insights_user_status
    ON insights(user_id, status, confidence DESC);
"""

REQUIRED_COLUMNS = {
    "journal_entries": ["user_id", "entry_date", "sleep_hours", "sleep_quality",
                        "mood_score", "energy_level", "stress_level",
                        "exercise_mins", "water_intake_ml"],
    "body_markers": ["entry_id", "user_id", "body_region", "symptom", "intensity"],
    "insights": ["user_id", "insight_type", "confidence", "factors",
                 "supporting_data", "status", "created_at"],
}

ENTRY_COLUMNS = (
    "id::text AS id, user_id, entry_date, sleep_hours, sleep_quality, "
    "mood_score, energy_level, stress_level, exercise_mins, exercise_type, "
    "water_intake_ml, notes, weather_temp, weather_cond, created_at"
)
MARKER_COLUMNS = (
    "id::text AS id, entry_id::text AS entry_id, user_id, body_region, "
    "x_pos, y_pos, symptom, intensity, created_at"
)
INSIGHT_COLUMNS = (
    "id::text AS id, user_id, insight_type, title, description, confidence, "
    "factors, supporting_data, status, created_at"
)


class PostgresRepository(HealthRepository):
    """HealthRepository on PostgreSQL via psycopg2."""

    def __init__(self, conn_str: Optional[str] = None):
        self.conn_str = conn_str or get_conn_str()

    # ─── Connection handling ───────────────────────────────

    @contextmanager
    def _cursor(self) -> Iterator[Any]:
        """Yield a dict cursor inside one committed transaction."""
        if not self.conn_str:
            raise StorageError("POSTGRES_CONNECTION_STRING (or DATABASE_URL) is not set")
        try:
            conn = psycopg2.connect(self.conn_str)
        except psycopg2.Error as e:
            raise StorageError(f"Could not connect to PostgreSQL: {e}") from e
        try:
            with conn:
                with conn.cursor(cursor_factory=RealDictCursor) as cur:
                    yield cur
        except pg_errors.UniqueViolation as e:
            raise DuplicateEntryError(str(e).strip()) from e
        except psycopg2.Error as e:
            raise StorageError(str(e).strip()) from e
        finally:
            conn.close()

    def bootstrap_schema(self) -> None:
        """Create tables if they don't exist."""
        with self._cursor() as cur:
            for stmt in SCHEMA_SQL.split(";"):
                stmt = stmt.strip()
                if stmt:
                    cur.execute(stmt)
        log.info("Insight schema ready.")

    def ping(self) -> bool:
        with self._cursor() as cur:
            cur.execute("SELECT 1 AS ok")
            return bool(cur.fetchone())

    # ─── Entries ───────────────────────────────────────────

    def create_entry(self, entry: JournalEntry) -> JournalEntry:
        data = entry.model_dump(exclude={"id", "created_at"})
        cols = list(data.keys())
        with self._cursor() as cur:
            cur.execute(
                f"""INSERT INTO journal_entries (id, {', '.join(cols)})
                    VALUES (%s, {', '.join(['%s'] * len(cols))})
                    RETURNING {ENTRY_COLUMNS}""",
                (entry.id or str(uuid.uuid4()), *data.values()),
            )
            return JournalEntry(**cur.fetchone())

    def get_all_entries(self, user_id: str) -> List[JournalEntry]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {ENTRY_COLUMNS} FROM journal_entries "
                "WHERE user_id = %s ORDER BY entry_date ASC",
                (user_id,),
            )
            return [JournalEntry(**row) for row in cur.fetchall()]

    # ─── Body markers ──────────────────────────────────────

    def create_body_marker(self, marker: BodyMarker) -> BodyMarker:
        with self._cursor() as cur:
            cur.execute(
                f"""INSERT INTO body_markers
                       (id, entry_id, user_id, body_region, x_pos, y_pos, symptom, intensity)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {MARKER_COLUMNS}""",
                (
                    marker.id or str(uuid.uuid4()), marker.entry_id, marker.user_id,
                    marker.body_region, marker.x_pos, marker.y_pos,
                    marker.symptom, marker.intensity,
                ),
            )
            return BodyMarker(**cur.fetchone())

    def get_all_markers(self, user_id: str) -> List[BodyMarker]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {MARKER_COLUMNS} FROM body_markers WHERE user_id = %s",
                (user_id,),
            )
            return [BodyMarker(**row) for row in cur.fetchall()]

    # ─── Insights ──────────────────────────────────────────

    def create_insight(self, draft: InsightDraft) -> Insight:
        factors = [f.model_dump() for f in draft.factors]
        with self._cursor() as cur:
            cur.execute(
                f"""INSERT INTO insights
                       (id, user_id, insight_type, title, description, confidence,
                        factors, supporting_data, status)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {INSIGHT_COLUMNS}""",
                (
                    str(uuid.uuid4()), draft.user_id, draft.insight_type,
                    draft.title, draft.description, round(draft.confidence, 2),
                    Json(factors),
                    Json(draft.supporting_data) if draft.supporting_data is not None else None,
                    draft.status,
                ),
            )
            return Insight(**cur.fetchone())

    def get_insight(self, insight_id: str) -> Optional[Insight]:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {INSIGHT_COLUMNS} FROM insights WHERE id::text = %s",
                (insight_id,),
            )
            row = cur.fetchone()
            return Insight(**row) if row else None

    def get_insights(self, user_id: str) -> List[Insight]:
        with self._cursor() as cur:
            cur.execute(
                f"""SELECT {INSIGHT_COLUMNS} FROM insights
                    WHERE user_id = %s AND status = 'active'
                    ORDER BY confidence DESC, created_at DESC""",
                (user_id,),
            )
            return [Insight(**row) for row in cur.fetchall()]

    def update_insight_status(self, insight_id: str, status: str) -> Insight:
        with self._cursor() as cur:
            cur.execute(
                "SELECT status FROM insights WHERE id::text = %s FOR UPDATE",
                (insight_id,),
            )
            row = cur.fetchone()
            if row is None:
                raise InsightNotFoundError(f"Insight {insight_id} not found")
            check_status_transition(row["status"], status)
            cur.execute(
                f"""UPDATE insights SET status = %s WHERE id::text = %s
                    RETURNING {INSIGHT_COLUMNS}""",
                (status, insight_id),
            )
            return Insight(**cur.fetchone())

    # ─── Audit ─────────────────────────────────────────────

    def schema_audit(self) -> Dict[str, Any]:
        """Return table/column audit data for runtime inspection."""
        out: Dict[str, Any] = {"ok": True, "tables": {}, "missing_tables": []}
        with self._cursor() as cur:
            for table, expected in REQUIRED_COLUMNS.items():
                cur.execute(
                    """
                    SELECT column_name
                    FROM information_schema.columns
                    WHERE table_schema = 'public' AND table_name = %s
                    ORDER BY ordinal_position
                    """,
                    (table,),
                )
                cols = [r["column_name"] for r in cur.fetchall()]
                if not cols:
                    out["missing_tables"].append(table)
                out["tables"][table] = {
                    "exists": bool(cols),
                    "columns": cols,
                    "missing_columns": [c for c in expected if c not in cols],
                }
        out["ok"] = not out["missing_tables"] and not any(
            info["missing_columns"] for info in out["tables"].values()
        )
        return out
