"""Playback, history and rating records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from session_engine.models.enums import Rating
from session_engine.models.track import TrackRecommendation


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PlaybackState:
    """Playback position of the current track.

    Replaced wholesale by the playback reducer; never mutated in place.
    Within one track ``position_s`` only grows, and it is reset to 0 exactly
    when a new track starts.
    """

    current: TrackRecommendation | None = None
    position_s: float = 0.0
    duration_s: float = 0.0
    midpoint_sent: bool = False

    @property
    def is_playing(self) -> bool:
        return self.current is not None


@dataclass(frozen=True)
class TrackHistoryEntry:
    """A track that played to its end. Append-only."""

    track: TrackRecommendation
    played_at: datetime
    completed_percentage: float  # 0-100
    listened_s: float = 0.0


@dataclass(frozen=True)
class TrackRating:
    """User feedback on a track. Append-only."""

    track: TrackRecommendation
    rating: Rating
    rated_at: datetime = field(default_factory=_utcnow)
    context: str = ""
