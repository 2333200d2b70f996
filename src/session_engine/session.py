"""RecommendationSession, the orchestrator for one workout's music session.

Owns every piece of mutable session state. All mutation happens on one
driving context (the caller of :meth:`RecommendationSession.tick` and the
other public methods); network work runs on a background executor and its
results are posted to an inbox that the next tick drains.

Usage:
    session = RecommendationSession(client, producer)
    session.start_workout(WorkoutType.RUNNING)
    outcome = session.request_recommendations()
    session.play()
    session.tick()            # once per second
    summary = session.end_workout()
"""

from __future__ import annotations

import dataclasses
import logging
import queue
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable

from scoring_client.exceptions import ScoringClientError
from session_engine import workout
from session_engine.feedback import FeedbackRecorder
from session_engine.math.summary import WorkoutSummary, summarize_workout
from session_engine.models.enums import (
    DEFAULT_ADAPTATION_STRATEGY,
    DEFAULT_TRACK_DURATION_S,
    MAIN_PHASE_AFTER_S,
    PLAYBACK_TICK_S,
    Rating,
    WorkoutMood,
    WorkoutPhase,
    WorkoutType,
)
from session_engine.models.health import HealthSnapshot
from session_engine.models.playback import TrackRating
from session_engine.models.session_state import RecommendationOutcome, SessionState
from session_engine.models.track import TrackRecommendation
from session_engine.models.workout import WorkoutState
from session_engine.notifications import LoggingNotifier, Notifier
from session_engine.playback import PlaybackEvent, PlaybackSessionTracker
from session_engine.producer import HealthSnapshotProducer
from session_engine.telemetry import TelemetryChannel

logger = logging.getLogger(__name__)

Subscriber = Callable[[SessionState], None]


class RecommendationSession:
    """Ties snapshot production, scoring requests, playback and feedback together.

    Each workout gets a new generation number. Results of requests issued
    under an older generation are discarded, so a request still in flight
    when a workout ends can never write into the torn-down session.
    """

    def __init__(
        self,
        client: Any,
        producer: HealthSnapshotProducer,
        notifier: Notifier | None = None,
        executor: Executor | None = None,
        default_duration_s: float = DEFAULT_TRACK_DURATION_S,
        main_phase_after_s: float = MAIN_PHASE_AFTER_S,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._producer = producer
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="scoring-io"
        )
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._main_phase_after_s = main_phase_after_s

        self._telemetry = TelemetryChannel(client, self._executor, now=self._now)
        self._tracker = PlaybackSessionTracker(
            notifier=notifier or LoggingNotifier(),
            telemetry=self._telemetry,
            default_duration_s=default_duration_s,
            now=self._now,
        )
        self._feedback = FeedbackRecorder(client, self._executor, now=self._now)

        self._workout = WorkoutState()
        self._generation = 0
        self._inbox: queue.SimpleQueue[tuple[int, Future]] = queue.SimpleQueue()
        self._pending: Future | None = None

        self._is_loading = False
        self._last_error: str | None = None
        self._ml_confidence = 0.0
        self._adaptation_strategy = ""
        self._optimal_features = None
        self._connected = False
        self._subscribers: list[Subscriber] = []

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def state(self) -> SessionState:
        """Immutable snapshot of everything observable about the session."""
        return SessionState(
            workout=self._workout,
            playback=self._tracker.state,
            queue=self._tracker.queue,
            history=self._tracker.history,
            ratings=self._feedback.ratings,
            is_loading=self._is_loading,
            last_error=self._last_error,
            ml_confidence=self._ml_confidence,
            adaptation_strategy=self._adaptation_strategy,
            optimal_features=self._optimal_features,
            connected=self._connected,
        )

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Deliver a SessionState to *callback* after every change.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Workout lifecycle
    # ------------------------------------------------------------------

    def start_workout(self, workout_type: WorkoutType | str) -> bool:
        """Begin a workout. Returns False if one is already active."""
        if self._workout.active:
            return False
        self._generation += 1
        # Requests issued before the start belong to the old generation
        self._pending = None
        self._is_loading = False
        self._workout = workout.start(self._workout, WorkoutType(workout_type), self._now())
        logger.info("Starting %s workout session", self._workout.workout_type.value)
        self._telemetry.emit("workout_start", workout_type=self._workout.workout_type)
        self._publish()
        return True

    def pause_workout(self) -> None:
        self._workout = workout.pause(self._workout)
        self._publish()

    def resume_workout(self) -> None:
        self._workout = workout.resume(self._workout)
        self._publish()

    def transition_to_cooldown(self) -> None:
        self._workout = workout.to_cooldown(self._workout)
        logger.info("Transitioning to cooldown phase")
        self._publish()

    def end_workout(self) -> WorkoutSummary | None:
        """Stop the workout, discard in-flight results and summarize listening.

        Returns None if no workout was active.
        """
        if not self._workout.active:
            return None

        started_at = self._workout.started_at
        self._generation += 1
        self._workout = workout.end(self._workout, self._now())
        self._tracker.stop()
        self._pending = None
        self._is_loading = False
        self._drain_inbox()

        self._telemetry.emit("workout_end")
        summary = summarize_workout(
            self._tracker.history, self._feedback.ratings, since=started_at
        )
        logger.info(
            "Workout ended after %s: %d tracks, %.0fs listening",
            workout.format_duration(self._workout.elapsed_s),
            summary.tracks_played,
            summary.total_listening_s,
        )
        self._publish()
        return summary

    def set_pre_workout_mood(self, mood: WorkoutMood | str) -> None:
        self._telemetry.emit("pre_workout_mood", mood=WorkoutMood(mood))

    def set_post_workout_mood(self, mood: WorkoutMood | str) -> None:
        self._telemetry.emit("post_workout_mood", mood=WorkoutMood(mood))

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def tick(self, seconds: float = PLAYBACK_TICK_S) -> tuple[PlaybackEvent, ...]:
        """Apply finished requests, then advance the workout and playback clocks.

        Does nothing but drain results while no workout is running.
        """
        self._drain_inbox()
        if not self._workout.is_running:
            return ()

        self._workout = workout.advance(self._workout, seconds, self._main_phase_after_s)
        events = self._tracker.tick(seconds)
        self._publish()
        return events

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    def request_recommendations(
        self,
        phase: WorkoutPhase | str | None = None,
        snapshot: HealthSnapshot | None = None,
    ) -> RecommendationOutcome:
        """Fetch and apply a batch synchronously.

        Errors are returned in the outcome, never raised. The phase defaults
        to the workout's current phase, the snapshot to the latest sample.
        """
        generation = self._generation
        self._set_loading()
        outcome = self._fetch(snapshot, phase or self._workout.phase)
        return self._apply_outcome(generation, outcome)

    def request_recommendations_async(
        self,
        phase: WorkoutPhase | str | None = None,
        snapshot: HealthSnapshot | None = None,
    ) -> Future:
        """Fetch a batch in the background; it is applied on the next tick.

        While a background request is outstanding, further calls return the
        same future instead of issuing another request.
        """
        if self._pending is not None and not self._pending.done():
            logger.debug("Recommendation request already in flight")
            return self._pending

        generation = self._generation
        self._set_loading()
        future = self._executor.submit(
            self._fetch, snapshot or self._producer.latest, phase or self._workout.phase
        )
        future.add_done_callback(lambda f: self._inbox.put((generation, f)))
        self._pending = future
        return future

    def refresh(self) -> Future | None:
        """Periodic refresh hook: request new recommendations while a workout runs."""
        if not self._workout.is_running:
            return None
        logger.debug("Refreshing recommendations for the current health state")
        return self.request_recommendations_async()

    def report_health(self, snapshot: HealthSnapshot | None = None) -> None:
        """Send a health sample to the service as telemetry."""
        snapshot = snapshot or self._producer.latest
        if snapshot is not None:
            self._telemetry.snapshot(snapshot)

    def connect(self) -> bool:
        """Check that the scoring service is reachable."""
        self._connected = self._client.check_connection()
        if not self._connected:
            self._last_error = f"Failed to connect to scoring service at {self._client.base_url}"
        self._publish()
        return self._connected

    # ------------------------------------------------------------------
    # Playback and feedback
    # ------------------------------------------------------------------

    def play(self, recommendation: TrackRecommendation | None = None) -> bool:
        """Play *recommendation*, or the queue head when none is given."""
        if recommendation is None:
            started = self._tracker.play_next()
        else:
            self._tracker.play(recommendation)
            started = True
        self._publish()
        return started

    def skip(self) -> bool:
        skipped = self._tracker.skip()
        if skipped:
            self._publish()
        return skipped

    def rate(
        self,
        track: TrackRecommendation,
        rating: Rating | str,
        context: str = "",
    ) -> TrackRating:
        record = self._feedback.rate(track, rating, context)
        self._publish()
        return record

    def close(self) -> None:
        """Release the background executor if this session created it."""
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _fetch(
        self, snapshot: HealthSnapshot | None, phase: WorkoutPhase | str
    ) -> RecommendationOutcome:
        try:
            snapshot = snapshot or self._producer.current()
            batch = self._client.request_recommendations(snapshot, phase)
        except ScoringClientError as exc:
            return RecommendationOutcome(error=exc)
        return RecommendationOutcome(batch=batch)

    def _apply_outcome(
        self, generation: int, outcome: RecommendationOutcome
    ) -> RecommendationOutcome:
        if generation != self._generation:
            logger.info("Discarding recommendation result from an ended session")
            return dataclasses.replace(outcome, applied=False)

        self._is_loading = False
        if outcome.error is not None:
            self._last_error = _describe_error(outcome.error)
            logger.warning("Recommendation request failed: %s", self._last_error)
            self._publish()
            return outcome

        batch = outcome.batch
        self._tracker.replace_queue(batch.recommendations)
        self._ml_confidence = batch.overall_confidence
        self._adaptation_strategy = batch.adaptation_strategy or DEFAULT_ADAPTATION_STRATEGY
        if batch.optimal_features is not None:
            self._optimal_features = batch.optimal_features
        self._last_error = None
        self._publish()
        return dataclasses.replace(outcome, applied=True)

    def _drain_inbox(self) -> None:
        while True:
            try:
                generation, future = self._inbox.get_nowait()
            except queue.Empty:
                return
            if future is self._pending:
                self._pending = None
            try:
                outcome = future.result()
            except Exception as exc:
                logger.exception("Recommendation request crashed")
                outcome = RecommendationOutcome(error=ScoringClientError(str(exc)))
            self._apply_outcome(generation, outcome)

    def _set_loading(self) -> None:
        self._is_loading = True
        self._last_error = None
        self._publish()

    def _publish(self) -> None:
        if not self._subscribers:
            return
        snapshot = self.state()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Session subscriber failed")


def _describe_error(exc: ScoringClientError) -> str:
    """User-facing message for a failed request."""
    kind = "Temporary problem" if exc.retryable else "Error"
    return f"{kind}: {exc}"
