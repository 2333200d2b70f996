"""Pure functions mapping scoring service response dicts to session models.

No I/O. Takes decoded JSON from ScoringClient methods and returns frozen
models. Schema violations and non-finite numbers raise
``ScoringProtocolError``; finite out-of-range scores are clamped rather than
rejected.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Optional

from scoring_client.exceptions import ScoringProtocolError
from session_engine.math.confidence import clamp_non_negative, clamp_unit
from session_engine.models.enums import DEFAULT_ACOUSTICNESS
from session_engine.models.track import (
    AudioFeatureVector,
    RealTimeAnalytics,
    RecommendationBatch,
    TrackRecommendation,
)


def map_recommendation_response(
    raw: Any, received_at: datetime | None = None
) -> RecommendationBatch:
    """Map a decoded ``/api/ml-recommendations`` response to a batch.

    Required keys: ``status``, ``recommendations``. ``optimal_features``,
    ``adaptation_strategy`` and ``timestamp`` are optional.
    """
    if not isinstance(raw, dict):
        raise ScoringProtocolError(f"Expected JSON object, got {type(raw).__name__}")

    status = raw.get("status")
    if not isinstance(status, str):
        raise ScoringProtocolError("Missing or invalid 'status'")

    items = raw.get("recommendations")
    if not isinstance(items, list):
        raise ScoringProtocolError("Missing or invalid 'recommendations' list")

    received_at = received_at or datetime.now(timezone.utc)
    recommendations = tuple(
        _map_recommendation(item, index, received_at) for index, item in enumerate(items)
    )

    optimal = raw.get("optimal_features")
    optimal_features = _map_features(optimal, "optimal_features") if optimal is not None else None

    strategy = raw.get("adaptation_strategy")
    if strategy is not None and not isinstance(strategy, str):
        raise ScoringProtocolError("'adaptation_strategy' must be a string")

    timestamp = raw.get("timestamp")
    return RecommendationBatch(
        recommendations=recommendations,
        optimal_features=optimal_features,
        adaptation_strategy=strategy,
        status=status,
        timestamp=str(timestamp) if timestamp is not None else None,
    )


def map_real_time_data(raw: Any) -> RealTimeAnalytics:
    """Map a decoded ``/api/real-time-data`` response."""
    if not isinstance(raw, dict):
        raise ScoringProtocolError(f"Expected JSON object, got {type(raw).__name__}")

    zone = _require_number(raw, "performance_zone", "real-time data")
    return RealTimeAnalytics(
        heart_rate=_require_number(raw, "heart_rate", "real-time data"),
        hrv=_require_number(raw, "hrv", "real-time data"),
        recovery_index=_require_number(raw, "recovery_index", "real-time data"),
        intensity_score=_require_number(raw, "intensity_score", "real-time data"),
        performance_zone=int(zone),
        music_energy=_require_number(raw, "music_energy", "real-time data"),
        timestamp=str(raw.get("timestamp", "")),
    )


# ---------------------------------------------------------------------------
# Internal mappers
# ---------------------------------------------------------------------------


def _map_recommendation(item: Any, index: int, received_at: datetime) -> TrackRecommendation:
    where = f"recommendations[{index}]"
    if not isinstance(item, dict):
        raise ScoringProtocolError(f"{where} is not an object")

    return TrackRecommendation(
        track_id=_require_str(item, "track_id", where),
        name=_require_str(item, "track_name", where),
        artist=_require_str(item, "artist", where),
        features=_map_features(item, where),
        similarity_score=_require_number(item, "similarity_score", where),
        ml_confidence=clamp_unit(_require_number(item, "ml_confidence", where)),
        reasoning=_require_str(item, "physiological_reasoning", where),
        received_at=received_at,
        duration_s=_extract_duration_s(item),
        url=_optional_str(item, "url"),
        preview_url=_optional_str(item, "preview_url"),
    )


def _map_features(data: Any, where: str) -> AudioFeatureVector:
    """Read the five audio features, clamping each into its legal range."""
    if not isinstance(data, dict):
        raise ScoringProtocolError(f"{where} audio features are not an object")

    acousticness = data.get("acousticness")
    return AudioFeatureVector(
        energy=clamp_unit(_require_number(data, "energy", where)),
        tempo=clamp_non_negative(_require_number(data, "tempo", where)),
        valence=clamp_unit(_require_number(data, "valence", where)),
        danceability=clamp_unit(_require_number(data, "danceability", where)),
        acousticness=(
            clamp_unit(_as_number(acousticness, f"{where}.acousticness"))
            if acousticness is not None
            else DEFAULT_ACOUSTICNESS
        ),
    )


def _extract_duration_s(item: dict) -> Optional[float]:
    """Track duration in seconds from ``duration_ms``; None when absent or unusable."""
    value = item.get("duration_ms")
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value) / 1000.0
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(seconds) or seconds <= 0:
        return None
    return seconds


def _require_number(data: dict, key: str, where: str) -> float:
    if key not in data or data[key] is None:
        raise ScoringProtocolError(f"{where}: missing '{key}'")
    return _as_number(data[key], f"{where}.{key}")


def _as_number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ScoringProtocolError(f"{where}: expected number, got {value!r}")
    try:
        number = float(value)
    except OverflowError as exc:
        raise ScoringProtocolError(f"{where}: number out of range") from exc
    if not math.isfinite(number):
        raise ScoringProtocolError(f"{where}: non-finite value {value!r}")
    return number


def _require_str(data: dict, key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ScoringProtocolError(f"{where}: missing or invalid '{key}'")
    return value


def _optional_str(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    return value if isinstance(value, str) else None
