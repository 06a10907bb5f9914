"""
Data shapes shared by the engine, storage backends and the API.

Persisted entities are pydantic models; the per-run analysis results
(FactorPair, TrendResult, SymptomGroup) are plain dataclasses that only
live for the duration of one generation pass.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from constants import DISCLAIMER

InsightType = Literal["correlation", "trend", "prediction"]
InsightStatus = Literal["active", "dismissed", "confirmed"]
PairDirection = Literal["positive", "negative", "neutral"]
TrendDirection = Literal["improving", "declining"]


# ─── Stored entities ───────────────────────────────────────

class JournalEntry(BaseModel):
    id: Optional[str] = None
    user_id: str
    entry_date: str  # YYYY-MM-DD
    sleep_hours: Optional[float] = None
    sleep_quality: Optional[int] = None
    mood_score: Optional[int] = None
    energy_level: Optional[int] = None
    stress_level: Optional[int] = None
    exercise_mins: Optional[int] = None
    exercise_type: Optional[str] = None
    water_intake_ml: Optional[int] = None
    notes: Optional[str] = None
    weather_temp: Optional[float] = None
    weather_cond: Optional[str] = None
    created_at: Optional[datetime] = None


class BodyMarker(BaseModel):
    id: Optional[str] = None
    entry_id: str
    user_id: str
    body_region: str
    x_pos: float = Field(ge=0, le=100)
    y_pos: float = Field(ge=0, le=100)
    symptom: str
    intensity: int = Field(ge=1, le=10)
    created_at: Optional[datetime] = None


class InsightFactor(BaseModel):
    name: str
    direction: PairDirection
    strength: float


class InsightDraft(BaseModel):
    """An insight before storage has assigned it an id and timestamp."""

    user_id: str
    insight_type: InsightType
    title: str
    description: str
    confidence: float = Field(ge=0, le=1)
    factors: List[InsightFactor]
    supporting_data: Optional[Dict[str, Any]] = None
    status: InsightStatus = "active"


class Insight(InsightDraft):
    id: str
    created_at: datetime


class GenerationMeta(BaseModel):
    entries_analyzed: int
    correlations_found: int
    trends_found: int
    symptoms_tracked: int


class GenerationResult(BaseModel):
    insights: List[Insight]
    meta: GenerationMeta
    disclaimer: str = DISCLAIMER


# ─── Transient analysis results ────────────────────────────

@dataclass
class FactorPair:
    factor_a: str
    factor_b: str
    correlation: float
    direction: str
    strength: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TrendResult:
    factor: str
    slope: float
    direction: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SymptomGroup:
    region: str
    symptom: str
    count: int
    avg_intensity: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
