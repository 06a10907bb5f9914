"""Linear drift per factor over entry order."""

from __future__ import annotations

from typing import Dict, List, Sequence

import numpy as np

from constants import MIN_TREND_POINTS, MIN_TREND_SLOPE
from models import TrendResult


def regression_slope(values: Sequence[float]) -> float:
    """OLS slope of value against 0-based entry index.

        slope = Σ(i − x̄)(yᵢ − ȳ) / Σ(i − x̄)²,   x̄ = (n − 1) / 2
    """
    y = np.asarray(values, dtype=np.float64)
    n = len(y)
    if n == 0:
        return 0.0
    dx = np.arange(n, dtype=np.float64) - (n - 1) / 2
    denominator = float(np.sum(dx * dx))
    if denominator == 0:
        return 0.0
    return float(np.sum(dx * (y - y.mean()))) / denominator


def detect_trends(factors: Dict[str, List[float]],
                  min_points: int = MIN_TREND_POINTS,
                  min_slope: float = MIN_TREND_SLOPE) -> List[TrendResult]:
    """Factors whose slope magnitude exceeds min_slope.

    Results stay in factor order; they are not re-ranked by magnitude.
    The direction is the raw sign of the slope. Whether that is good news
    for the factor is decided by the caller.
    """
    trends: List[TrendResult] = []
    for key, values in factors.items():
        if len(values) < min_points:
            continue
        slope = regression_slope(values)
        if abs(slope) > min_slope:
            trends.append(TrendResult(
                factor=key,
                slope=slope,
                direction="improving" if slope > 0 else "declining",
            ))
    return trends
