"""Listening history aggregation for end-of-workout summaries."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

import numpy as np
import pandas as pd

from session_engine.models.playback import TrackHistoryEntry, TrackRating


@dataclass(frozen=True)
class WorkoutSummary:
    """What was listened to during one workout."""

    tracks_played: int = 0
    total_listening_s: float = 0.0
    mean_completion_pct: float = 0.0
    ratings: dict[str, int] = field(default_factory=dict)


def completion_percentage(position_s: float, duration_s: float) -> float:
    """Share of a track that was played, clamped to [0, 100]."""
    if duration_s <= 0:
        return 0.0
    return float(np.clip(position_s / duration_s * 100.0, 0.0, 100.0))


def history_frame(history: Sequence[TrackHistoryEntry]) -> pd.DataFrame:
    """One row per finished track."""
    return pd.DataFrame(
        {
            "track_id": [h.track.track_id for h in history],
            "track_name": [h.track.name for h in history],
            "artist": [h.track.artist for h in history],
            "played_at": pd.to_datetime([h.played_at for h in history], utc=True),
            "completed_percentage": [h.completed_percentage for h in history],
            "listened_s": [h.listened_s for h in history],
        }
    )


def summarize_workout(
    history: Sequence[TrackHistoryEntry],
    ratings: Sequence[TrackRating] = (),
    since: datetime | None = None,
) -> WorkoutSummary:
    """Aggregate history and ratings, optionally only those at or after *since*.

    *since* must be timezone-aware.
    """
    df = history_frame(history)
    if since is not None and not df.empty:
        df = df[df["played_at"] >= pd.Timestamp(since)]

    rating_counts: dict[str, int] = {}
    for r in ratings:
        if since is not None and r.rated_at < since:
            continue
        rating_counts[r.rating.value] = rating_counts.get(r.rating.value, 0) + 1

    if df.empty:
        return WorkoutSummary(ratings=rating_counts)

    return WorkoutSummary(
        tracks_played=int(len(df)),
        total_listening_s=float(df["listened_s"].sum()),
        mean_completion_pct=float(df["completed_percentage"].mean()),
        ratings=rating_counts,
    )
