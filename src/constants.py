"""
Shared constants used across multiple modules.
Single source of truth for tracked factors, defaults and insight thresholds.
"""

# Tracked daily factors, in the order they are analysed
FACTOR_KEYS = [
    "sleep_hours",
    "sleep_quality",
    "mood_score",
    "energy_level",
    "stress_level",
    "exercise_mins",
    "water_intake_ml",
]

# Neutral value substituted when a journal entry leaves a factor unset
FACTOR_DEFAULTS = {
    "sleep_hours":     7,
    "sleep_quality":   3,
    "mood_score":      3,
    "energy_level":    3,
    "stress_level":    3,
    "exercise_mins":   0,
    "water_intake_ml": 2000,
}

FACTOR_DISPLAY_NAMES = {
    "sleep_hours":     "Sleep Duration",
    "sleep_quality":   "Sleep Quality",
    "mood_score":      "Mood",
    "energy_level":    "Energy",
    "stress_level":    "Stress",
    "exercise_mins":   "Exercise",
    "water_intake_ml": "Water Intake",
}

# Factors where a falling value is the healthy direction
INVERSE_FACTORS = {"stress_level"}

# Analysis thresholds
MIN_ENTRIES_FOR_INSIGHTS = 7
DEFAULT_CORRELATION_THRESHOLD = 0.3
MIN_CORRELATION_POINTS = 3
MIN_TREND_POINTS = 5
MIN_TREND_SLOPE = 0.05

# How many results of each kind become insights per run
MAX_CORRELATION_INSIGHTS = 3
MAX_TREND_INSIGHTS = 2
MAX_SYMPTOM_INSIGHTS = 1

# Confidence ceilings per insight kind
CORRELATION_CONFIDENCE_CAP = 0.95
TREND_CONFIDENCE_CAP = 0.90
SYMPTOM_CONFIDENCE_CAP = 0.85

# Insight vocabulary
INSIGHT_TYPES = ("correlation", "trend", "prediction")
INSIGHT_STATUSES = ("active", "dismissed", "confirmed")
PAIR_DIRECTIONS = ("positive", "negative", "neutral")
TREND_DIRECTIONS = ("improving", "declining")

# active -> confirmed is part of the status vocabulary but nothing moves an
# insight there yet; dismissed is terminal.
STATUS_TRANSITIONS = {
    "active": {"dismissed"},
    "dismissed": set(),
    "confirmed": set(),
}

# Per-user cap on generation requests at the HTTP boundary
DAILY_GENERATION_LIMIT = 3

DISCLAIMER = (
    "These insights describe associations in your own journal data. "
    "They are not a diagnosis; talk to a healthcare provider about "
    "symptoms that concern you."
)
