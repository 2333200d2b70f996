"""Observable session snapshot and request outcome types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from session_engine.models.playback import PlaybackState, TrackHistoryEntry, TrackRating
from session_engine.models.track import (
    AudioFeatureVector,
    RecommendationBatch,
    TrackRecommendation,
)
from session_engine.models.workout import WorkoutState

if TYPE_CHECKING:
    from scoring_client.exceptions import ScoringClientError


@dataclass(frozen=True)
class RecommendationOutcome:
    """Result of one recommendation request: a batch or an error, never both.

    ``applied`` is False when the batch arrived after its session ended and
    was discarded.
    """

    batch: RecommendationBatch | None = None
    error: ScoringClientError | None = None
    applied: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.batch is not None


@dataclass(frozen=True)
class SessionState:
    """Everything a subscriber may observe about a session, at one instant."""

    workout: WorkoutState = field(default_factory=WorkoutState)
    playback: PlaybackState = field(default_factory=PlaybackState)
    queue: tuple[TrackRecommendation, ...] = field(default_factory=tuple)
    history: tuple[TrackHistoryEntry, ...] = field(default_factory=tuple)
    ratings: tuple[TrackRating, ...] = field(default_factory=tuple)
    is_loading: bool = False
    last_error: str | None = None
    ml_confidence: float = 0.0
    adaptation_strategy: str = ""
    optimal_features: AudioFeatureVector | None = None
    connected: bool = False
