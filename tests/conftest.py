"""
Shared test configuration.

Adds src/ to sys.path so flat modules (insight_engine, api, ...) and the
analytics/storage packages import the same way they do at runtime, and
provides small builders for journal data.
"""

import os
import sys
from datetime import date, timedelta

import pytest

_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_src_dir = os.path.join(_project_root, "src")

if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from models import BodyMarker, JournalEntry  # noqa: E402
from storage.memory import MemoryRepository  # noqa: E402

USER_ID = "user-1"
START_DATE = date(2026, 2, 1)


def make_entries(n, user_id=USER_ID, **series):
    """Build n consecutive daily entries.

    Each keyword maps a factor name to a list of n values (None = unset).
    """
    entries = []
    for i in range(n):
        fields = {name: values[i] for name, values in series.items()}
        entries.append(JournalEntry(
            user_id=user_id,
            entry_date=(START_DATE + timedelta(days=i)).isoformat(),
            **fields,
        ))
    return entries


def make_marker(region, symptom, intensity, entry_id="entry-1", user_id=USER_ID):
    return BodyMarker(
        entry_id=entry_id,
        user_id=user_id,
        body_region=region,
        x_pos=50,
        y_pos=50,
        symptom=symptom,
        intensity=intensity,
    )


@pytest.fixture
def repo():
    return MemoryRepository()


@pytest.fixture
def seed(repo):
    """Store entries (and optional markers) in the memory repository."""
    def _seed(entries, markers=()):
        stored = [repo.create_entry(e) for e in entries]
        for m in markers:
            repo.create_body_marker(m)
        return stored
    return _seed
