"""Session runner: drives a live recommendation session on fixed intervals.

Three APScheduler interval jobs:
    playback tick          every TICK_INTERVAL_S (1 s)
    health snapshot        every SNAPSHOT_INTERVAL_S (2 s)
    recommendation refresh every REFRESH_INTERVAL_S (30 s)

Tick, refresh and the user actions (play, skip, rate) share one lock with
:meth:`SessionRunner.stop`, so session state is only ever touched by one
thread at a time. While jobs are scheduled, drive the session through the
runner rather than through ``runner.session`` directly. Snapshot sampling
runs on its own executor because it may wait on the network.

Usage:
    python -m scheduler.session_runner --workout running --minutes 30
    python -m scheduler.session_runner --simulate --minutes 5
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
import time

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

from scoring_client import ScoringClient, ScoringConfigError
from session_engine.math.summary import WorkoutSummary
from session_engine.models.enums import Rating, WorkoutType
from session_engine.models.playback import TrackRating
from session_engine.models.track import TrackRecommendation
from session_engine.producer import (
    HealthSnapshotProducer,
    RealTimeMetricsSource,
    SimulatedMetricsSource,
)
from session_engine.session import RecommendationSession

from scheduler.config import (
    DEFAULT_TRACK_DURATION_S,
    LOG_LEVEL,
    MAIN_PHASE_AFTER_S,
    REFRESH_INTERVAL_S,
    SCORING_SERVICE_URL,
    SCORING_TIMEOUT_S,
    SNAPSHOT_INTERVAL_S,
    TICK_INTERVAL_S,
)

logger = logging.getLogger(__name__)

TICK_JOB_ID = "playback_tick"
SNAPSHOT_JOB_ID = "health_snapshot"
REFRESH_JOB_ID = "recommendation_refresh"
_JOB_IDS = (TICK_JOB_ID, SNAPSHOT_JOB_ID, REFRESH_JOB_ID)


def _default_scheduler() -> BackgroundScheduler:
    return BackgroundScheduler(
        executors={
            "default": ThreadPoolExecutor(1),
            "sampler": ThreadPoolExecutor(1),
        },
        job_defaults={"coalesce": True, "max_instances": 1},
    )


class SessionRunner:
    """Schedules the periodic jobs of one RecommendationSession."""

    def __init__(
        self,
        session: RecommendationSession,
        producer: HealthSnapshotProducer,
        scheduler: BackgroundScheduler | None = None,
        tick_s: float = TICK_INTERVAL_S,
        snapshot_s: float = SNAPSHOT_INTERVAL_S,
        refresh_s: float = REFRESH_INTERVAL_S,
        autoplay: bool = True,
    ) -> None:
        self.session = session
        self._producer = producer
        self._scheduler = scheduler or _default_scheduler()
        self._tick_s = tick_s
        self._snapshot_s = snapshot_s
        self._refresh_s = refresh_s
        self._autoplay = autoplay
        self._lock = threading.Lock()

    def start(self, workout_type: WorkoutType | str) -> None:
        """Start the workout, request a first batch and schedule the jobs."""
        with self._lock:
            if not self.session.start_workout(workout_type):
                logger.warning("Workout already active, not rescheduling")
                return
            self.session.request_recommendations_async()

        self._scheduler.add_job(
            self.tick, "interval", seconds=self._tick_s, id=TICK_JOB_ID, replace_existing=True
        )
        self._scheduler.add_job(
            self.sample,
            "interval",
            seconds=self._snapshot_s,
            id=SNAPSHOT_JOB_ID,
            executor="sampler",
            replace_existing=True,
        )
        self._scheduler.add_job(
            self.refresh,
            "interval",
            seconds=self._refresh_s,
            id=REFRESH_JOB_ID,
            replace_existing=True,
        )
        if not self._scheduler.running:
            self._scheduler.start()
        logger.info(
            "Session jobs scheduled: tick %gs, snapshot %gs, refresh %gs",
            self._tick_s,
            self._snapshot_s,
            self._refresh_s,
        )

    def tick(self) -> None:
        with self._lock:
            self.session.tick(self._tick_s)
            if self._autoplay:
                state = self.session.state()
                if state.workout.is_running and not state.playback.is_playing and state.queue:
                    self.session.play()

    def sample(self) -> None:
        snapshot = self._producer.poll()
        if snapshot is not None:
            self.session.report_health(snapshot)

    def refresh(self) -> None:
        with self._lock:
            self.session.refresh()

    def play(self, recommendation: TrackRecommendation | None = None) -> bool:
        with self._lock:
            return self.session.play(recommendation)

    def skip(self) -> bool:
        with self._lock:
            return self.session.skip()

    def rate(
        self, track: TrackRecommendation, rating: Rating | str, context: str = ""
    ) -> TrackRating:
        with self._lock:
            return self.session.rate(track, rating, context)

    def stop(self) -> WorkoutSummary | None:
        """Unschedule every job, then end the workout.

        Jobs are removed under the session lock, so no tick or refresh can
        run after this returns.
        """
        with self._lock:
            for job_id in _JOB_IDS:
                try:
                    self._scheduler.remove_job(job_id)
                except JobLookupError:
                    pass
            return self.session.end_workout()

    def shutdown(self) -> WorkoutSummary | None:
        summary = self.stop()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self.session.close()
        return summary


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Health-driven music session runner")
    parser.add_argument(
        "--workout",
        choices=[w.value for w in WorkoutType],
        default=WorkoutType.RUNNING.value,
        help="Workout type to start",
    )
    parser.add_argument("--minutes", type=float, default=30.0, help="Session length")
    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Use simulated health metrics instead of the real-time endpoint",
    )
    parser.add_argument("--url", default=SCORING_SERVICE_URL, help="Scoring service base URL")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        client = ScoringClient(base_url=args.url, timeout_s=SCORING_TIMEOUT_S)
    except ScoringConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    source = SimulatedMetricsSource() if args.simulate else RealTimeMetricsSource(client)
    producer = HealthSnapshotProducer(source)
    session = RecommendationSession(
        client,
        producer,
        default_duration_s=DEFAULT_TRACK_DURATION_S,
        main_phase_after_s=MAIN_PHASE_AFTER_S,
    )
    if not session.connect():
        logger.warning("Continuing without a confirmed connection to %s", args.url)

    runner = SessionRunner(session, producer)
    runner.start(args.workout)
    try:
        time.sleep(args.minutes * 60)
    except (KeyboardInterrupt, SystemExit):
        logger.info("Session interrupted")
    finally:
        summary = runner.shutdown()
        client.close()

    if summary is not None:
        logger.info(
            "Workout summary: %d tracks, %.0fs listening, %.0f%% mean completion, ratings %s",
            summary.tracks_played,
            summary.total_listening_s,
            summary.mean_completion_pct,
            summary.ratings,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
