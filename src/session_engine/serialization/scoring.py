"""Scoring service JSON serialization for session models.

Converts internal models → request bodies for the scoring service's
endpoints.

All functions are pure (no I/O, no network calls).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from session_engine.models.enums import WorkoutPhase
from session_engine.models.health import HealthSnapshot
from session_engine.models.playback import TrackRating
from session_engine.models.track import TrackRecommendation

# Field order the service documents for health_state.
_HEALTH_STATE_KEYS = (
    "heart_rate",
    "hrv",
    "training_load",
    "cadence",
    "recovery_index",
    "intensity_score",
    "fatigue_index",
    "performance_zone",
)


def to_recommendation_request(
    snapshot: HealthSnapshot, phase: WorkoutPhase
) -> dict[str, Any]:
    """Body for ``POST /api/ml-recommendations``."""
    return {
        "health_state": {key: getattr(snapshot, key) for key in _HEALTH_STATE_KEYS},
        "workout_phase": WorkoutPhase(phase).value,
    }


def to_rating_payload(rating: TrackRating) -> dict[str, Any]:
    """Body for ``POST /api/track-rating``."""
    track = rating.track
    return {
        "track_id": track.track_id,
        "track_name": track.name,
        "artist": track.artist,
        "rating": rating.rating.value,
        "context": rating.context,
        "audio_features": track.features.as_dict(),
    }


def to_health_data_event(event: str, timestamp: datetime, **fields: Any) -> dict[str, Any]:
    """Event-tagged body for ``POST /api/health-data``.

    Enum values are flattened to their wire strings; the timestamp is sent
    as epoch seconds.
    """
    body: dict[str, Any] = {"event": event}
    for key, value in fields.items():
        body[key] = value.value if hasattr(value, "value") else value
    body["timestamp"] = timestamp.timestamp()
    return body


def to_snapshot_event(snapshot: HealthSnapshot) -> dict[str, Any]:
    """Raw health sample body for ``POST /api/health-data``."""
    body: dict[str, Any] = dict(snapshot.metrics())
    body["event"] = "health_snapshot"
    body["timestamp"] = snapshot.captured_at.timestamp()
    return body


def to_track_started_event(
    recommendation: TrackRecommendation, timestamp: datetime
) -> dict[str, Any]:
    """``track_started`` playback event."""
    return to_health_data_event(
        "track_started",
        timestamp,
        track_id=recommendation.track_id,
        track_name=recommendation.name,
        artist=recommendation.artist,
        similarity_score=recommendation.similarity_score,
        ml_confidence=recommendation.ml_confidence,
    )

