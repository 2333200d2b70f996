"""Playback session tracking: a pure reducer plus the tracker that owns the queue.

State machine per track::

    Idle -> Playing -> (MidpointReached) -> Playing -> Ended -> Idle(next)

:func:`advance` is a pure function of the current :class:`PlaybackState` and
elapsed seconds; it returns the next state and the events that fired.
:class:`PlaybackSessionTracker` applies those events: midpoint notifications,
history entries and auto-advance to the head of the queue.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Union

from session_engine.math.summary import completion_percentage
from session_engine.models.enums import (
    DEFAULT_TRACK_DURATION_S,
    MIDPOINT_FRACTION,
    PLAYBACK_TICK_S,
)
from session_engine.models.playback import PlaybackState, TrackHistoryEntry
from session_engine.models.track import TrackRecommendation
from session_engine.notifications import Notifier, midpoint_notification
from session_engine.telemetry import TelemetryChannel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MidpointReached:
    """Playback crossed half of the track's duration."""

    track: TrackRecommendation


@dataclass(frozen=True)
class TrackEnded:
    """Playback reached the track's duration."""

    track: TrackRecommendation
    position_s: float
    duration_s: float


PlaybackEvent = Union[MidpointReached, TrackEnded]


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------


def start_track(
    recommendation: TrackRecommendation,
    default_duration_s: float = DEFAULT_TRACK_DURATION_S,
) -> PlaybackState:
    """State for a freshly started track: position 0, midpoint flag cleared.

    Tracks without a usable duration fall back to *default_duration_s* so the
    tracker always progresses.
    """
    duration = recommendation.duration_s
    if duration is None or duration <= 0:
        duration = default_duration_s
    return PlaybackState(
        current=recommendation,
        position_s=0.0,
        duration_s=float(duration),
        midpoint_sent=False,
    )


def advance(
    state: PlaybackState, seconds: float = PLAYBACK_TICK_S
) -> tuple[PlaybackState, tuple[PlaybackEvent, ...]]:
    """Move playback forward by *seconds*.

    Fires ``MidpointReached`` at most once per track and ``TrackEnded`` when
    the position reaches the duration, after which the state is idle.
    """
    if seconds < 0:
        raise ValueError(f"Playback cannot move backwards ({seconds}s)")
    if state.current is None:
        return state, ()

    position = state.position_s + seconds
    events: list[PlaybackEvent] = []

    midpoint_sent = state.midpoint_sent
    if (
        not midpoint_sent
        and state.duration_s > 0
        and position >= state.duration_s * MIDPOINT_FRACTION
    ):
        events.append(MidpointReached(track=state.current))
        midpoint_sent = True

    if position >= state.duration_s:
        events.append(
            TrackEnded(track=state.current, position_s=position, duration_s=state.duration_s)
        )
        return PlaybackState(), tuple(events)

    return (
        dataclasses.replace(state, position_s=position, midpoint_sent=midpoint_sent),
        tuple(events),
    )


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------


class PlaybackSessionTracker:
    """Owns the current track, the recommendation queue and listening history.

    The currently playing queued track is the queue's head. It leaves the
    queue when it ends or is skipped, and the new head starts playing.
    Not thread-safe: drive it from a single context.
    """

    def __init__(
        self,
        notifier: Notifier | None = None,
        telemetry: TelemetryChannel | None = None,
        default_duration_s: float = DEFAULT_TRACK_DURATION_S,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._notifier = notifier
        self._telemetry = telemetry
        self._default_duration_s = default_duration_s
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._state = PlaybackState()
        self._queue: list[TrackRecommendation] = []
        self._history: list[TrackHistoryEntry] = []

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def queue(self) -> tuple[TrackRecommendation, ...]:
        return tuple(self._queue)

    @property
    def history(self) -> tuple[TrackHistoryEntry, ...]:
        return tuple(self._history)

    def replace_queue(self, recommendations: Iterable[TrackRecommendation]) -> None:
        """Swap in a freshly fetched ranking. The current track keeps playing."""
        self._queue = list(recommendations)

    def play(self, recommendation: TrackRecommendation) -> None:
        """Start *recommendation* from the beginning."""
        self._state = start_track(recommendation, self._default_duration_s)
        logger.info(
            "Playing %s by %s (confidence %.2f): %s",
            recommendation.name,
            recommendation.artist,
            recommendation.ml_confidence,
            recommendation.reasoning,
        )
        if self._telemetry is not None:
            self._telemetry.track_started(recommendation)

    def play_next(self) -> bool:
        """Start the queue head if idle. Returns True if something started."""
        if self._state.is_playing or not self._queue:
            return False
        self.play(self._queue[0])
        return True

    def tick(self, seconds: float = PLAYBACK_TICK_S) -> tuple[PlaybackEvent, ...]:
        """Advance playback and apply any events that fired."""
        self._state, events = advance(self._state, seconds)
        for event in events:
            if isinstance(event, MidpointReached):
                self._on_midpoint(event)
            else:
                self._on_track_ended(event)
        return events

    def skip(self) -> bool:
        """Drop the queue head and play the next one.

        No-op unless more than one recommendation is queued. Returns True if
        the skip happened.
        """
        if len(self._queue) <= 1:
            return False

        current = self._state.current
        if current is not None and self._telemetry is not None:
            self._telemetry.emit(
                "track_skipped",
                track_id=current.track_id,
                position=self._state.position_s,
                duration=self._state.duration_s,
            )

        skipped = self._queue.pop(0)
        logger.info("Skipped %s", skipped.name)
        self.play(self._queue[0])
        return True

    def stop(self) -> None:
        """Return to idle without recording history."""
        self._state = PlaybackState()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_midpoint(self, event: MidpointReached) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.post(midpoint_notification(event.track))
        except Exception as exc:
            logger.warning("Failed to post midpoint notification: %s", exc)

    def _on_track_ended(self, event: TrackEnded) -> None:
        entry = TrackHistoryEntry(
            track=event.track,
            played_at=self._now(),
            completed_percentage=completion_percentage(event.position_s, event.duration_s),
            listened_s=min(event.position_s, event.duration_s),
        )
        self._history.append(entry)
        logger.info(
            "Finished %s (%.0f%% played)", event.track.name, entry.completed_percentage
        )

        if self._queue and self._queue[0] == event.track:
            self._queue.pop(0)
        if self._queue:
            self.play(self._queue[0])
