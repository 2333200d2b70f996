"""Data models for the recommendation session."""

from session_engine.models.enums import (
    PerformanceZone,
    Rating,
    WorkoutMood,
    WorkoutPhase,
    WorkoutType,
)
from session_engine.models.health import HealthSnapshot
from session_engine.models.playback import PlaybackState, TrackHistoryEntry, TrackRating
from session_engine.models.session_state import RecommendationOutcome, SessionState
from session_engine.models.track import (
    AudioFeatureVector,
    RealTimeAnalytics,
    RecommendationBatch,
    TrackRecommendation,
)
from session_engine.models.workout import WorkoutState

__all__ = [
    "AudioFeatureVector",
    "HealthSnapshot",
    "PerformanceZone",
    "PlaybackState",
    "Rating",
    "RealTimeAnalytics",
    "RecommendationBatch",
    "RecommendationOutcome",
    "SessionState",
    "TrackHistoryEntry",
    "TrackRating",
    "TrackRecommendation",
    "WorkoutMood",
    "WorkoutPhase",
    "WorkoutState",
    "WorkoutType",
]
