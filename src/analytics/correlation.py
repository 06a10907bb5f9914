"""Pairwise Pearson correlation across factor series."""

from __future__ import annotations

import math
from itertools import combinations
from typing import Dict, List, Optional, Sequence

import numpy as np

from constants import DEFAULT_CORRELATION_THRESHOLD, MIN_CORRELATION_POINTS
from models import FactorPair


def pearson_correlation(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Pearson r from raw sums.

        r = (nΣxy − ΣxΣy) / √((nΣx² − (Σx)²)(nΣy² − (Σy)²))

    Returns 0.0 for fewer than 3 points or when either series is constant.
    """
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    n = len(x)
    if n < MIN_CORRELATION_POINTS:
        return 0.0
    # raw-sums cancellation leaves a tiny positive spread for constants like 7.3
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return 0.0

    sum_x = float(np.sum(x))
    sum_y = float(np.sum(y))
    sum_xy = float(np.sum(x * y))
    sum_x2 = float(np.sum(x * x))
    sum_y2 = float(np.sum(y * y))

    numerator = n * sum_xy - sum_x * sum_y
    spread = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)
    # rounding can push a zero-variance product a hair below zero
    if spread <= 0:
        return 0.0
    return numerator / math.sqrt(spread)


def classify_pair_direction(r: float) -> str:
    if r > 0:
        return "positive"
    if r < 0:
        return "negative"
    # r == 0 never clears a positive threshold
    return "neutral"


def find_correlations(factors: Dict[str, List[float]],
                      threshold: Optional[float] = None) -> List[FactorPair]:
    """Every unordered factor pair with |r| >= threshold, strongest first.

    Pairs are discovered in factor key order and the sort is stable, so
    equal strengths keep discovery order.
    """
    if threshold is None:
        threshold = DEFAULT_CORRELATION_THRESHOLD

    pairs: List[FactorPair] = []
    for key_a, key_b in combinations(list(factors.keys()), 2):
        r = pearson_correlation(factors[key_a], factors[key_b])
        if abs(r) >= threshold:
            pairs.append(FactorPair(
                factor_a=key_a,
                factor_b=key_b,
                correlation=r,
                direction=classify_pair_direction(r),
                strength=abs(r),
            ))

    pairs.sort(key=lambda p: p.strength, reverse=True)
    return pairs
