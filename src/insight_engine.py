"""
Insight Engine
==============
Turns a user's journal history into a handful of ranked, plain-language
insight records and stores them.

Pipeline (one synchronous pass, no state kept between runs):
  Step 0  Load:        all entries (oldest first) + all body markers.
  Step 1  Factors:     entries -> seven aligned series, neutral defaults
                        for unset fields.
  Step 2  Correlation: Pearson r for every factor pair, |r| >= threshold.
  Step 3  Trends:      OLS slope per factor over entry index.
  Step 4  Symptoms:    markers grouped by (region, symptom).
  Step 5  Synthesis:   up to 3 correlation + 2 trend + 1 symptom insight,
                        each written to storage before it is returned.

The signals are associations inside one person's data. Nothing here makes
causal or diagnostic claims.

Repeated runs are not deduplicated: every call writes a fresh set of
insights. Callers that need once-only semantics serialize requests per
user.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from analytics.correlation import find_correlations
from analytics.factors import extract_factors
from analytics.symptoms import analyze_symptoms
from analytics.trends import detect_trends
from constants import (
    CORRELATION_CONFIDENCE_CAP,
    DEFAULT_CORRELATION_THRESHOLD,
    FACTOR_DISPLAY_NAMES,
    INVERSE_FACTORS,
    MAX_CORRELATION_INSIGHTS,
    MAX_SYMPTOM_INSIGHTS,
    MAX_TREND_INSIGHTS,
    MIN_ENTRIES_FOR_INSIGHTS,
    SYMPTOM_CONFIDENCE_CAP,
    TREND_CONFIDENCE_CAP,
)
from errors import InsufficientDataError
from models import (
    FactorPair,
    GenerationMeta,
    GenerationResult,
    Insight,
    InsightDraft,
    InsightFactor,
    SymptomGroup,
    TrendResult,
)
from storage.base import HealthRepository

log = logging.getLogger("insight_engine")


# ─── Confidence scoring ────────────────────────────────────

def correlation_confidence(strength: float) -> float:
    return min(CORRELATION_CONFIDENCE_CAP, strength + 0.10)


def trend_confidence(slope: float) -> float:
    return min(TREND_CONFIDENCE_CAP, abs(slope) * 5 + 0.50)


def symptom_confidence(count: int) -> float:
    return min(SYMPTOM_CONFIDENCE_CAP, count * 0.10 + 0.40)


def display_name(factor: str) -> str:
    return FACTOR_DISPLAY_NAMES.get(factor, factor)


def is_healthy_trend(trend: TrendResult) -> bool:
    """Rising is good for every factor except the inverse ones (stress)."""
    if trend.factor in INVERSE_FACTORS:
        return trend.direction == "declining"
    return trend.direction == "improving"


# ─── Drafting ──────────────────────────────────────────────

def draft_correlation_insight(user_id: str, pair: FactorPair) -> InsightDraft:
    name_a = display_name(pair.factor_a)
    name_b = display_name(pair.factor_b)
    pct = round(pair.strength * 100)

    if pair.direction == "positive":
        title = f"{name_a} and {name_b} move together"
        description = (
            f"When your {name_a.lower()} goes up, your {name_b.lower()} tends to go up too. "
            f"This {pct}% correlation suggests these factors are connected for you."
        )
    else:
        title = f"{name_a} inversely affects {name_b}"
        description = (
            f"Higher {name_a.lower()} tends to correspond with lower {name_b.lower()}. "
            f"This inverse relationship ({pct}% strength) is worth monitoring."
        )

    return InsightDraft(
        user_id=user_id,
        insight_type="correlation",
        title=title,
        description=description,
        confidence=correlation_confidence(pair.strength),
        factors=[
            InsightFactor(name=name_a, direction=pair.direction, strength=pair.strength),
            InsightFactor(name=name_b, direction=pair.direction, strength=pair.strength),
        ],
        supporting_data=pair.to_dict(),
    )


def draft_trend_insight(user_id: str, trend: TrendResult) -> InsightDraft:
    name = display_name(trend.factor)
    healthy = is_healthy_trend(trend)

    if healthy:
        title = f"{name} is improving 📈"
        description = (
            f"Your {name.lower()} has been gradually improving over your recent entries. "
            "Keep up the positive habits!"
        )
    else:
        title = f"{name} needs attention 📉"
        description = (
            f"Your {name.lower()} shows a declining trend. Consider reviewing recent "
            "lifestyle changes that may be contributing."
        )

    return InsightDraft(
        user_id=user_id,
        insight_type="trend",
        title=title,
        description=description,
        confidence=trend_confidence(trend.slope),
        factors=[
            InsightFactor(
                name=name,
                direction="positive" if healthy else "negative",
                strength=min(1.0, abs(trend.slope) * 5),
            ),
        ],
        supporting_data=trend.to_dict(),
    )


def draft_symptom_insight(user_id: str, group: SymptomGroup) -> InsightDraft:
    region = group.region.replace("_", " ")
    return InsightDraft(
        user_id=user_id,
        insight_type="prediction",
        title=f"Recurring {group.symptom} in {region}",
        description=(
            f"You've reported {group.symptom.lower()} in your {region} area "
            f"{group.count} times with an average intensity of "
            f"{group.avg_intensity:.1f}/10. Consider discussing this pattern "
            "with your healthcare provider."
        ),
        confidence=symptom_confidence(group.count),
        factors=[
            InsightFactor(
                name=f"{group.symptom} ({region})",
                direction="negative",
                strength=min(1.0, group.avg_intensity / 10),
            ),
        ],
        supporting_data=group.to_dict(),
    )


# ─── Engine ────────────────────────────────────────────────

class InsightEngine:
    """Runs the analysis pipeline against an injected repository."""

    def __init__(self, repository: HealthRepository,
                 correlation_threshold: Optional[float] = None,
                 min_entries: Optional[int] = None):
        self.repository = repository
        self.correlation_threshold = (
            DEFAULT_CORRELATION_THRESHOLD if correlation_threshold is None
            else correlation_threshold
        )
        self.min_entries = MIN_ENTRIES_FOR_INSIGHTS if min_entries is None else min_entries

    def generate_insights(self, user_id: str) -> GenerationResult:
        """Analyse the user's full history and persist new insights.

        Raises InsufficientDataError below the minimum entry count.
        StorageError from the repository propagates unchanged; insights
        written before the failure stay written.
        """
        entries = self.repository.get_all_entries(user_id)
        markers = self.repository.get_all_markers(user_id)

        if len(entries) < self.min_entries:
            log.warning(
                "Not enough data for %s: %d entries (need >= %d)",
                user_id, len(entries), self.min_entries,
            )
            raise InsufficientDataError(self.min_entries, len(entries))

        factors = extract_factors(entries)
        correlations = find_correlations(factors, threshold=self.correlation_threshold)
        trends = detect_trends(factors)
        symptoms = analyze_symptoms(markers)

        drafts: List[InsightDraft] = []
        drafts.extend(
            draft_correlation_insight(user_id, pair)
            for pair in correlations[:MAX_CORRELATION_INSIGHTS]
        )
        # first-found order, not strongest-first
        drafts.extend(
            draft_trend_insight(user_id, trend)
            for trend in trends[:MAX_TREND_INSIGHTS]
        )
        drafts.extend(
            draft_symptom_insight(user_id, group)
            for group in symptoms[:MAX_SYMPTOM_INSIGHTS]
        )

        insights: List[Insight] = []
        for draft in drafts:
            insights.append(self.repository.create_insight(draft))

        log.info(
            "\n   INSIGHT DIGEST (%s)\n"
            "   Entries analysed      : %d\n"
            "   Body markers          : %d\n"
            "   Correlations found    : %d (threshold %.2f)\n"
            "   Trends found          : %d\n"
            "   Symptom groups        : %d\n"
            "   Insights stored       : %d",
            user_id,
            len(entries),
            len(markers),
            len(correlations),
            self.correlation_threshold,
            len(trends),
            len(symptoms),
            len(insights),
        )

        return GenerationResult(
            insights=insights,
            meta=GenerationMeta(
                entries_analyzed=len(entries),
                correlations_found=len(correlations),
                trends_found=len(trends),
                symptoms_tracked=len(symptoms),
            ),
        )
