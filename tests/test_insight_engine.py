"""
Tests for the insight engine (synthesis over a memory repository).

Covers: minimum-entry gate, per-kind caps, confidence ceilings, trend
health semantics, symptom selection, persistence side effects,
metadata totals, repeated runs and partial storage failure.
"""
import pytest

from constants import (
    CORRELATION_CONFIDENCE_CAP,
    MIN_ENTRIES_FOR_INSIGHTS,
    SYMPTOM_CONFIDENCE_CAP,
    TREND_CONFIDENCE_CAP,
)
from conftest import USER_ID, make_entries, make_marker
from errors import InsufficientDataError, StorageError
from insight_engine import (
    InsightEngine,
    correlation_confidence,
    draft_correlation_insight,
    draft_symptom_insight,
    draft_trend_insight,
    is_healthy_trend,
    symptom_confidence,
    trend_confidence,
)
from models import FactorPair, SymptomGroup, TrendResult
from storage.memory import MemoryRepository


def _patterned_entries(user_id=USER_ID):
    """Seven days where sleep, mood and energy rise while stress falls."""
    return make_entries(
        7,
        user_id=user_id,
        sleep_hours=[6, 6.5, 7, 7.5, 8, 8.5, 9],
        mood_score=[2, 2, 3, 3, 4, 4, 5],
        energy_level=[2, 3, 3, 4, 4, 5, 5],
        stress_level=[5, 4, 4, 3, 3, 2, 1],
    )


def _symptom_markers():
    return (
        [make_marker("head", "Throbbing", 7) for _ in range(5)]
        + [make_marker("knee", "Ache", 3) for _ in range(2)]
    )


# ─── Confidence scoring ─────────────────────────────────────


class TestConfidence:

    def test_correlation_ceiling(self):
        assert correlation_confidence(1.0) == CORRELATION_CONFIDENCE_CAP
        assert correlation_confidence(0.3) == pytest.approx(0.4)

    def test_trend_ceiling(self):
        assert trend_confidence(50.0) == TREND_CONFIDENCE_CAP
        assert trend_confidence(-50.0) == TREND_CONFIDENCE_CAP
        assert trend_confidence(0.06) == pytest.approx(0.8)

    def test_symptom_ceiling(self):
        assert symptom_confidence(1000) == SYMPTOM_CONFIDENCE_CAP
        assert symptom_confidence(2) == pytest.approx(0.6)


# ─── Drafting ───────────────────────────────────────────────


class TestDrafts:

    def test_positive_pair_template(self):
        pair = FactorPair("sleep_hours", "mood_score", 0.82, "positive", 0.82)
        draft = draft_correlation_insight(USER_ID, pair)
        assert draft.insight_type == "correlation"
        assert draft.title == "Sleep Duration and Mood move together"
        assert "82% correlation" in draft.description
        assert draft.confidence == pytest.approx(0.92)
        assert [f.name for f in draft.factors] == ["Sleep Duration", "Mood"]
        assert all(f.direction == "positive" for f in draft.factors)
        assert draft.supporting_data == pair.to_dict()
        assert draft.status == "active"

    def test_negative_pair_template(self):
        pair = FactorPair("stress_level", "sleep_quality", -0.5, "negative", 0.5)
        draft = draft_correlation_insight(USER_ID, pair)
        assert draft.title == "Stress inversely affects Sleep Quality"
        assert "50% strength" in draft.description

    def test_falling_stress_is_healthy(self):
        trend = TrendResult("stress_level", -0.3, "declining")
        assert is_healthy_trend(trend)
        draft = draft_trend_insight(USER_ID, trend)
        assert "📈" in draft.title
        assert draft.factors[0].direction == "positive"

    def test_rising_stress_needs_attention(self):
        trend = TrendResult("stress_level", 0.3, "improving")
        assert not is_healthy_trend(trend)
        assert draft_trend_insight(USER_ID, trend).title == "Stress needs attention 📉"

    def test_falling_sleep_needs_attention(self):
        trend = TrendResult("sleep_hours", -0.2, "declining")
        draft = draft_trend_insight(USER_ID, trend)
        assert draft.title == "Sleep Duration needs attention 📉"
        assert draft.factors[0].direction == "negative"
        assert draft.factors[0].strength == pytest.approx(1.0)
        assert draft.confidence == pytest.approx(TREND_CONFIDENCE_CAP)

    def test_symptom_template(self):
        group = SymptomGroup("lower_back", "Dull ache", 3, 5.333)
        draft = draft_symptom_insight(USER_ID, group)
        assert draft.insight_type == "prediction"
        assert draft.title == "Recurring Dull ache in lower back"
        assert "3 times" in draft.description
        assert "5.3/10" in draft.description
        assert draft.confidence == pytest.approx(0.7)
        assert draft.factors[0].name == "Dull ache (lower back)"
        assert draft.factors[0].strength == pytest.approx(0.5333)


# ─── generate_insights ──────────────────────────────────────


class TestGenerateInsights:

    def test_six_entries_is_insufficient(self, repo, seed):
        seed(make_entries(MIN_ENTRIES_FOR_INSIGHTS - 1), _symptom_markers())
        with pytest.raises(InsufficientDataError) as exc:
            InsightEngine(repo).generate_insights(USER_ID)
        assert exc.value.required == 7
        assert exc.value.actual == 6
        assert exc.value.missing == 1
        assert repo.get_insights(USER_ID) == []

    def test_seven_entries_proceed(self, repo, seed):
        seed(make_entries(MIN_ENTRIES_FOR_INSIGHTS))
        result = InsightEngine(repo).generate_insights(USER_ID)
        # all-default history: nothing varies, so nothing to report
        assert result.insights == []
        assert result.meta.entries_analyzed == 7
        assert result.meta.correlations_found == 0
        assert result.meta.trends_found == 0
        assert result.meta.symptoms_tracked == 0

    def test_other_users_data_ignored(self, repo, seed):
        seed(_patterned_entries(user_id="someone-else"))
        with pytest.raises(InsufficientDataError):
            InsightEngine(repo).generate_insights(USER_ID)

    def test_full_run_caps_each_kind(self, repo, seed):
        seed(_patterned_entries(), _symptom_markers())
        result = InsightEngine(repo).generate_insights(USER_ID)

        kinds = [i.insight_type for i in result.insights]
        assert kinds == ["correlation"] * 3 + ["trend"] * 2 + ["prediction"]

        # metadata reports totals before capping
        assert result.meta.entries_analyzed == 7
        assert result.meta.correlations_found == 6
        assert result.meta.trends_found == 4
        assert result.meta.symptoms_tracked == 2

    def test_correlation_insights_strongest_first(self, repo, seed):
        seed(_patterned_entries())
        result = InsightEngine(repo).generate_insights(USER_ID)
        strengths = [
            i.supporting_data["strength"]
            for i in result.insights if i.insight_type == "correlation"
        ]
        assert strengths == sorted(strengths, reverse=True)
        assert all(
            i.confidence <= CORRELATION_CONFIDENCE_CAP
            for i in result.insights if i.insight_type == "correlation"
        )

    def test_trend_cap_uses_discovery_order(self, repo, seed):
        """Known non-optimal policy: the first two trends found win.

        Stress has the steepest slope here but comes after sleep and mood
        in factor order, so it is left out.
        """
        seed(_patterned_entries())
        result = InsightEngine(repo).generate_insights(USER_ID)
        trend_factors = [
            i.supporting_data["factor"]
            for i in result.insights if i.insight_type == "trend"
        ]
        assert trend_factors == ["sleep_hours", "mood_score"]

    def test_symptom_insight_uses_top_group_only(self, repo, seed):
        seed(_patterned_entries(), _symptom_markers())
        result = InsightEngine(repo).generate_insights(USER_ID)
        predictions = [i for i in result.insights if i.insight_type == "prediction"]
        assert len(predictions) == 1
        top = predictions[0]
        assert top.title == "Recurring Throbbing in head"
        assert top.supporting_data["count"] == 5
        assert top.supporting_data["avg_intensity"] == pytest.approx(7.0)
        assert top.confidence == pytest.approx(SYMPTOM_CONFIDENCE_CAP)

    def test_every_insight_persisted_active(self, repo, seed):
        seed(_patterned_entries(), _symptom_markers())
        result = InsightEngine(repo).generate_insights(USER_ID)
        for insight in result.insights:
            stored = repo.get_insight(insight.id)
            assert stored is not None
            assert stored.status == "active"
            assert stored.created_at is not None
        assert len(repo.get_insights(USER_ID)) == 6

    def test_repeated_runs_are_not_deduplicated(self, repo, seed):
        seed(_patterned_entries(), _symptom_markers())
        engine = InsightEngine(repo)
        first = engine.generate_insights(USER_ID)
        second = engine.generate_insights(USER_ID)

        assert len(first.insights) == len(second.insights) == 6
        first_ids = {i.id for i in first.insights}
        second_ids = {i.id for i in second.insights}
        assert first_ids.isdisjoint(second_ids)
        assert len(repo.get_insights(USER_ID)) == 12

    def test_custom_threshold_drops_weaker_pairs(self, repo, seed):
        seed(_patterned_entries())
        result = InsightEngine(repo, correlation_threshold=0.999).generate_insights(USER_ID)
        assert result.meta.correlations_found == 0
        assert all(i.insight_type != "correlation" for i in result.insights)

    def test_result_carries_disclaimer(self, repo, seed):
        seed(_patterned_entries())
        result = InsightEngine(repo).generate_insights(USER_ID)
        assert "not a diagnosis" in result.disclaimer


class _FailingRepository(MemoryRepository):
    """Memory repository whose insight writes fail after a few succeed."""

    def __init__(self, fail_after):
        super().__init__()
        self.fail_after = fail_after
        self.writes = 0

    def create_insight(self, draft):
        if self.writes >= self.fail_after:
            raise StorageError("disk full")
        self.writes += 1
        return super().create_insight(draft)


class TestStorageFailure:

    def test_partial_failure_keeps_written_insights(self):
        repo = _FailingRepository(fail_after=2)
        for entry in _patterned_entries():
            repo.create_entry(entry)

        with pytest.raises(StorageError):
            InsightEngine(repo).generate_insights(USER_ID)

        assert len(repo.get_insights(USER_ID)) == 2

    def test_read_failure_propagates(self, repo):
        def boom(user_id):
            raise StorageError("connection reset")

        repo.get_all_entries = boom
        with pytest.raises(StorageError):
            InsightEngine(repo).generate_insights(USER_ID)
