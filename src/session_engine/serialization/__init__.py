"""Build scoring service request bodies."""

from session_engine.serialization.scoring import (
    to_health_data_event,
    to_rating_payload,
    to_recommendation_request,
    to_snapshot_event,
    to_track_started_event,
)

__all__ = [
    "to_health_data_event",
    "to_rating_payload",
    "to_recommendation_request",
    "to_snapshot_event",
    "to_track_started_event",
]
