"""Group body-map markers by (region, symptom)."""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence, Union

import pandas as pd

from models import BodyMarker, SymptomGroup

MarkerLike = Union[BodyMarker, Mapping[str, Any]]


def _marker_row(marker: MarkerLike) -> dict:
    if isinstance(marker, BodyMarker):
        marker = marker.model_dump()
    return {
        "body_region": marker["body_region"],
        "symptom": marker["symptom"],
        "intensity": float(marker["intensity"]),
    }


def analyze_symptoms(markers: Sequence[MarkerLike]) -> List[SymptomGroup]:
    """Count and mean intensity per (region, symptom), most frequent first.

    Groups with equal counts keep the order in which they first appear.
    """
    if not markers:
        return []

    frame = pd.DataFrame([_marker_row(m) for m in markers])
    grouped = (
        frame.groupby(["body_region", "symptom"], sort=False)["intensity"]
        .agg(occurrences="count", avg_intensity="mean")
        .reset_index()
        .sort_values("occurrences", ascending=False, kind="stable")
    )
    return [
        SymptomGroup(
            region=row.body_region,
            symptom=row.symptom,
            count=int(row.occurrences),
            avg_intensity=float(row.avg_intensity),
        )
        for row in grouped.itertuples(index=False)
    ]
