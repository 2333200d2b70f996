"""Track recommendation models returned by the scoring service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from session_engine.math.confidence import overall_confidence
from session_engine.models.enums import DEFAULT_ACOUSTICNESS


@dataclass(frozen=True)
class AudioFeatureVector:
    """Audio characteristics of a track (or the service's optimal target).

    Tempo is in BPM; every other feature lies in [0, 1].
    """

    energy: float
    tempo: float
    valence: float
    danceability: float
    acousticness: float = DEFAULT_ACOUSTICNESS

    def as_dict(self) -> dict[str, float]:
        return {
            "energy": self.energy,
            "tempo": self.tempo,
            "valence": self.valence,
            "danceability": self.danceability,
            "acousticness": self.acousticness,
        }


@dataclass(frozen=True)
class TrackRecommendation:
    """One ranked track suggestion with the service's scores.

    ``duration_s`` is None when the service did not report one; the
    playback tracker then applies its fallback duration.
    """

    track_id: str
    name: str
    artist: str
    features: AudioFeatureVector
    similarity_score: float
    ml_confidence: float  # 0.0-1.0, clamped on decode
    reasoning: str = ""
    received_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    duration_s: float | None = None
    url: str | None = None
    preview_url: str | None = None


@dataclass(frozen=True)
class RecommendationBatch:
    """The ranked result of a single scoring request.

    ``recommendations`` keeps server rank order (index 0 = best).
    """

    recommendations: tuple[TrackRecommendation, ...] = field(default_factory=tuple)
    optimal_features: AudioFeatureVector | None = None
    adaptation_strategy: str | None = None
    status: str = "success"
    timestamp: str | None = None

    @property
    def overall_confidence(self) -> float:
        """Mean ML confidence of the batch; 0.0 when empty."""
        return overall_confidence(r.ml_confidence for r in self.recommendations)

    def __len__(self) -> int:
        return len(self.recommendations)


@dataclass(frozen=True)
class RealTimeAnalytics:
    """Live metrics reported by the service's real-time endpoint."""

    heart_rate: float
    hrv: float
    recovery_index: float
    intensity_score: float
    performance_zone: int
    music_energy: float
    timestamp: str
