"""
Storage Package
===============
Repository interface plus the backends that implement it.

Modules:
  base     - HealthRepository ABC and status-transition rules
  memory   - dict-backed repository (tests, local runs)
  postgres - psycopg2 repository with schema bootstrap and audit
"""

from __future__ import annotations

import logging
from typing import Optional

from config import Settings, load_settings
from storage.base import HealthRepository
from storage.memory import MemoryRepository
from storage.postgres import PostgresRepository

log = logging.getLogger("storage")


def get_repository(settings: Optional[Settings] = None) -> HealthRepository:
    """Build the repository selected by INSIGHT_STORAGE_BACKEND."""
    settings = settings or load_settings()
    backend = settings.storage_backend
    if backend == "postgres":
        return PostgresRepository(settings.conn_str)
    if backend == "memory":
        return MemoryRepository()
    raise ValueError(f"Unknown storage backend: {backend}")


__all__ = [
    "HealthRepository",
    "MemoryRepository",
    "PostgresRepository",
    "get_repository",
]
