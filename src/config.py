"""Configuration loaded from .env"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

from constants import (
    DAILY_GENERATION_LIMIT,
    DEFAULT_CORRELATION_THRESHOLD,
    MIN_ENTRIES_FOR_INSIGHTS,
)

load_dotenv()

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def normalize_db_url(value: str) -> str:
    db_url = (value or "").strip()
    if db_url.startswith("postgres://"):
        db_url = db_url.replace("postgres://", "postgresql://", 1)
    return db_url


def get_conn_str() -> str:
    """Return PostgreSQL connection string.

    Checks POSTGRES_CONNECTION_STRING first, falls back to DATABASE_URL
    (Heroku standard).  Normalises postgres:// to postgresql:// for psycopg2.
    """
    return normalize_db_url(
        os.getenv("POSTGRES_CONNECTION_STRING") or os.getenv("DATABASE_URL") or ""
    )


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]


@dataclass
class Settings:
    conn_str: str = ""
    storage_backend: str = "memory"
    correlation_threshold: float = DEFAULT_CORRELATION_THRESHOLD
    min_entries: int = MIN_ENTRIES_FOR_INSIGHTS
    daily_generation_limit: int = DAILY_GENERATION_LIMIT
    frontend_origins: List[str] = field(default_factory=lambda: list(DEFAULT_ORIGINS))
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment (after .env has been loaded)."""
    return Settings(
        conn_str=get_conn_str(),
        storage_backend=os.getenv("INSIGHT_STORAGE_BACKEND", "memory").strip().lower(),
        correlation_threshold=float(
            os.getenv("INSIGHT_CORRELATION_THRESHOLD", str(DEFAULT_CORRELATION_THRESHOLD))
        ),
        min_entries=int(os.getenv("INSIGHT_MIN_ENTRIES", str(MIN_ENTRIES_FOR_INSIGHTS))),
        daily_generation_limit=int(
            os.getenv("INSIGHT_DAILY_GENERATION_LIMIT", str(DAILY_GENERATION_LIMIT))
        ),
        frontend_origins=_split_csv(os.getenv("FRONTEND_ORIGINS", "")) or list(DEFAULT_ORIGINS),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
