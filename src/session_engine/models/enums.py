"""Enumerations and fixed constants for the recommendation session.

Wire-facing enums are ``str`` enums so their values serialize directly into
request bodies.
"""

from enum import Enum, IntEnum


class WorkoutPhase(str, Enum):
    """Workout phase sent with every recommendation request."""

    WARMUP = "warmup"
    MAIN = "main"
    COOLDOWN = "cooldown"


class WorkoutType(str, Enum):
    """Kinds of workout a session can track."""

    RUNNING = "running"
    CYCLING = "cycling"
    STRENGTH = "strength"
    YOGA = "yoga"
    HIIT = "hiit"


class WorkoutMood(str, Enum):
    """Self-reported mood before or after a workout."""

    ENERGETIC = "energetic"
    CALM = "calm"
    MOTIVATED = "motivated"
    TIRED = "tired"
    NEUTRAL = "neutral"


class Rating(str, Enum):
    """User feedback on a played track, strongest to weakest."""

    LOVE = "love"
    LIKE = "like"
    NEUTRAL = "neutral"
    DISLIKE = "dislike"
    SKIP = "skip"


class PerformanceZone(IntEnum):
    """Heart-rate-derived training intensity bucket."""

    ZONE_1 = 1
    ZONE_2 = 2
    ZONE_3 = 3
    ZONE_4 = 4
    ZONE_5 = 5


# ---------------------------------------------------------------------------
# Performance zone thresholds (bpm), ascending, strict less-than
# ---------------------------------------------------------------------------
ZONE_UPPER_BOUNDS_BPM = (
    (114.0, PerformanceZone.ZONE_1),
    (133.0, PerformanceZone.ZONE_2),
    (152.0, PerformanceZone.ZONE_3),
    (171.0, PerformanceZone.ZONE_4),
)

# Heart rate assumed when no reading is available yet
RESTING_FALLBACK_HR_BPM = 72.0

# ---------------------------------------------------------------------------
# Playback
# ---------------------------------------------------------------------------
DEFAULT_TRACK_DURATION_S = 180.0
PLAYBACK_TICK_S = 1.0
MIDPOINT_FRACTION = 0.5

# ---------------------------------------------------------------------------
# Workout phases
# ---------------------------------------------------------------------------
MAIN_PHASE_AFTER_S = 300.0

# ---------------------------------------------------------------------------
# Audio features
# ---------------------------------------------------------------------------
DEFAULT_ACOUSTICNESS = 0.3
DEFAULT_ADAPTATION_STRATEGY = "Maintain current parameters"
