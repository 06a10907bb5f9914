"""Turn journal entries into aligned numeric series, one per tracked factor."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Union

import pandas as pd

from constants import FACTOR_DEFAULTS, FACTOR_KEYS
from models import JournalEntry

EntryLike = Union[JournalEntry, Mapping[str, Any]]


def _entry_row(entry: EntryLike) -> Dict[str, Any]:
    if isinstance(entry, JournalEntry):
        entry = entry.model_dump()
    return {key: entry.get(key) for key in FACTOR_KEYS}


def extract_factors(entries: Sequence[EntryLike]) -> Dict[str, List[float]]:
    """Build {factor: values} with one value per entry, in input order.

    List order is the time axis, so callers pass entries sorted by date.
    Days without an entry are simply absent; nothing is interpolated.
    Unset fields take the factor's value from FACTOR_DEFAULTS.
    """
    frame = pd.DataFrame([_entry_row(e) for e in entries], columns=FACTOR_KEYS)
    frame = frame.astype("float64").fillna(value=FACTOR_DEFAULTS)
    return {key: frame[key].tolist() for key in FACTOR_KEYS}
