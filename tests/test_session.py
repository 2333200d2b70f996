"""Tests for RecommendationSession orchestration."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from scoring_client.exceptions import ScoringAPIError, ScoringTransportError
from session_engine.models.enums import Rating, WorkoutPhase, WorkoutType
from session_engine.models.track import AudioFeatureVector, RecommendationBatch
from session_engine.producer import HealthSnapshotProducer, SimulatedMetricsSource
from session_engine.session import RecommendationSession


@pytest.fixture
def client(ranked_batch):
    mock = MagicMock()
    mock.base_url = "http://scoring.test:5000"
    mock.request_recommendations.return_value = ranked_batch
    return mock


@pytest.fixture
def producer(clock):
    return HealthSnapshotProducer(SimulatedMetricsSource(seed=42), now=clock)


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def session(client, producer, notifier, inline_executor, clock):
    return RecommendationSession(
        client, producer, notifier=notifier, executor=inline_executor, now=clock
    )


@pytest.fixture
def deferred_session(client, producer, notifier, deferred_executor, clock):
    return RecommendationSession(
        client, producer, notifier=notifier, executor=deferred_executor, now=clock
    )


def _sent_events(client) -> list[str]:
    return [c.args[0]["event"] for c in client.send_health_data.call_args_list]


# ---------------------------------------------------------------------------
# Workout lifecycle
# ---------------------------------------------------------------------------


class TestWorkoutLifecycle:
    def test_start_reports_event(self, session, client):
        assert session.start_workout(WorkoutType.RUNNING) is True
        state = session.state()
        assert state.workout.active
        assert state.workout.phase == WorkoutPhase.WARMUP
        assert _sent_events(client) == ["workout_start"]

    def test_second_start_rejected(self, session):
        session.start_workout("running")
        assert session.start_workout("cycling") is False
        assert session.state().workout.workout_type == WorkoutType.RUNNING

    def test_end_without_workout_returns_none(self, session):
        assert session.end_workout() is None

    def test_end_stops_playback_and_summarizes(self, session, client, main_phase_snapshot):
        session.start_workout("running")
        session.request_recommendations(WorkoutPhase.MAIN, main_phase_snapshot)
        session.play()
        for _ in range(100):
            session.tick()
        summary = session.end_workout()

        assert summary.tracks_played == 1
        assert summary.total_listening_s == 100.0
        state = session.state()
        assert not state.workout.active
        assert not state.playback.is_playing
        assert "workout_end" in _sent_events(client)

    def test_tick_does_nothing_while_paused(self, session, ranked_batch, main_phase_snapshot):
        session.start_workout("running")
        session.request_recommendations(snapshot=main_phase_snapshot)
        session.play()
        session.pause_workout()
        assert session.tick() == ()
        assert session.state().playback.position_s == 0.0
        assert session.state().workout.elapsed_s == 0.0
        session.resume_workout()
        session.tick()
        assert session.state().playback.position_s == 1.0

    def test_warmup_becomes_main_after_threshold(
        self, client, producer, inline_executor, clock
    ):
        session = RecommendationSession(
            client, producer, executor=inline_executor, main_phase_after_s=3.0, now=clock
        )
        session.start_workout("running")
        for _ in range(3):
            session.tick()
        assert session.state().workout.phase == WorkoutPhase.MAIN

    def test_mood_events(self, session, client):
        session.set_pre_workout_mood("energetic")
        session.set_post_workout_mood("tired")
        payloads = [c.args[0] for c in client.send_health_data.call_args_list]
        assert payloads[0]["event"] == "pre_workout_mood"
        assert payloads[0]["mood"] == "energetic"
        assert payloads[1]["mood"] == "tired"


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------


class TestRequestRecommendations:
    def test_success_replaces_queue(self, session, client, main_phase_snapshot):
        session.start_workout("running")
        outcome = session.request_recommendations(WorkoutPhase.MAIN, main_phase_snapshot)

        assert outcome.ok and outcome.applied
        client.request_recommendations.assert_called_once_with(
            main_phase_snapshot, WorkoutPhase.MAIN
        )
        state = session.state()
        assert [r.track_id for r in state.queue] == ["A", "B", "C"]
        assert state.ml_confidence == pytest.approx(0.7)
        assert state.adaptation_strategy == "Hold tempo near cadence"
        assert state.is_loading is False
        assert state.last_error is None

    def test_defaults_to_current_phase_and_latest_snapshot(self, session, client, producer):
        session.start_workout("running")
        session.request_recommendations()
        snapshot, phase = client.request_recommendations.call_args.args
        assert phase == WorkoutPhase.WARMUP
        assert snapshot is producer.latest

    def test_missing_strategy_gets_default(self, session, client, make_recommendation):
        client.request_recommendations.return_value = RecommendationBatch(
            recommendations=(make_recommendation("A"),),
            optimal_features=AudioFeatureVector(0.8, 160.0, 0.6, 0.7),
        )
        session.request_recommendations()
        state = session.state()
        assert state.adaptation_strategy == "Maintain current parameters"
        assert state.optimal_features.tempo == 160.0

    def test_transport_error_returned_not_raised(self, session, client):
        session.request_recommendations()
        client.request_recommendations.side_effect = ScoringTransportError("timed out after 10s")

        outcome = session.request_recommendations()

        assert isinstance(outcome.error, ScoringTransportError)
        assert not outcome.ok
        state = session.state()
        assert state.last_error.startswith("Temporary problem")
        assert state.is_loading is False
        assert [r.track_id for r in state.queue] == ["A", "B", "C"]

    def test_client_error_message(self, session, client):
        client.request_recommendations.side_effect = ScoringAPIError(
            "POST /api/ml-recommendations returned HTTP 400", status_code=400
        )
        session.request_recommendations()
        assert session.state().last_error.startswith("Error: ")

    def test_sync_requests_always_issue(self, session, client):
        session.request_recommendations()
        session.request_recommendations()
        assert client.request_recommendations.call_count == 2

    def test_replacing_queue_keeps_current_track(
        self, session, client, make_recommendation, main_phase_snapshot
    ):
        session.start_workout("running")
        session.request_recommendations(snapshot=main_phase_snapshot)
        session.play()
        session.tick(5.0)
        client.request_recommendations.return_value = RecommendationBatch(
            recommendations=(make_recommendation("D"),)
        )
        session.request_recommendations(snapshot=main_phase_snapshot)
        state = session.state()
        assert state.playback.current.track_id == "A"
        assert [r.track_id for r in state.queue] == ["D"]


class TestAsyncRequests:
    def test_result_applied_on_next_tick(self, deferred_session, deferred_executor):
        deferred_session.start_workout("running")
        deferred_session.request_recommendations_async()
        assert deferred_session.state().is_loading

        deferred_executor.run_all()
        assert deferred_session.state().queue == ()

        deferred_session.tick()
        state = deferred_session.state()
        assert [r.track_id for r in state.queue] == ["A", "B", "C"]
        assert not state.is_loading

    def test_concurrent_requests_coalesce(self, deferred_session, deferred_executor, client):
        deferred_session.start_workout("running")
        first = deferred_session.request_recommendations_async()
        second = deferred_session.request_recommendations_async()
        assert first is second

        deferred_executor.run_all()
        deferred_session.tick()
        assert client.request_recommendations.call_count == 1

        third = deferred_session.request_recommendations_async()
        assert third is not first

    def test_late_result_discarded_after_end(
        self, deferred_session, deferred_executor, client
    ):
        deferred_session.start_workout("running")
        deferred_session.request_recommendations_async()
        deferred_session.end_workout()

        deferred_executor.run_all()
        deferred_session.tick()

        state = deferred_session.state()
        assert state.queue == ()
        assert state.ml_confidence == 0.0
        assert not state.is_loading

    def test_idle_request_does_not_stay_loading_after_start(
        self, deferred_session, deferred_executor
    ):
        deferred_session.request_recommendations_async()
        assert deferred_session.state().is_loading

        deferred_session.start_workout("running")
        assert not deferred_session.state().is_loading

        deferred_executor.run_all()
        deferred_session.tick()
        state = deferred_session.state()
        assert not state.is_loading
        assert state.queue == ()

    def test_request_after_start_not_coalesced_with_stale_one(
        self, deferred_session, deferred_executor, client
    ):
        stale = deferred_session.request_recommendations_async()
        deferred_session.start_workout("running")
        fresh = deferred_session.request_recommendations_async()
        assert fresh is not stale

        deferred_executor.run_all()
        deferred_session.tick()
        assert client.request_recommendations.call_count == 2
        assert [r.track_id for r in deferred_session.state().queue] == ["A", "B", "C"]

    def test_late_result_not_applied_to_next_workout(
        self, deferred_session, deferred_executor
    ):
        deferred_session.start_workout("running")
        deferred_session.request_recommendations_async()
        deferred_session.end_workout()
        deferred_session.start_workout("cycling")

        deferred_executor.run_all()
        deferred_session.tick()
        assert deferred_session.state().queue == ()

    def test_refresh_only_while_running(self, session, client):
        assert session.refresh() is None
        session.start_workout("running")
        session.pause_workout()
        assert session.refresh() is None
        session.resume_workout()
        assert session.refresh() is not None


# ---------------------------------------------------------------------------
# Playback and feedback
# ---------------------------------------------------------------------------


class TestPlaybackAndFeedback:
    def test_end_to_end_queue_flow(self, session, client, notifier, main_phase_snapshot):
        session.start_workout(WorkoutType.RUNNING)
        session.request_recommendations(WorkoutPhase.MAIN, main_phase_snapshot)
        assert session.play() is True
        assert session.state().playback.current.track_id == "A"

        for _ in range(50):
            session.tick()
        assert notifier.post.call_count == 1

        for _ in range(50):
            session.tick()
        assert notifier.post.call_count == 1

        state = session.state()
        assert [h.track.track_id for h in state.history] == ["A"]
        assert state.history[0].completed_percentage == 100.0
        assert state.playback.current.track_id == "B"
        assert [r.track_id for r in state.queue] == ["B", "C"]
        assert "track_started" in _sent_events(client)

    def test_skip(self, session, client, main_phase_snapshot):
        session.start_workout("running")
        session.request_recommendations(snapshot=main_phase_snapshot)
        session.play()
        assert session.skip() is True
        assert session.state().playback.current.track_id == "B"
        assert "track_skipped" in _sent_events(client)

    def test_rating_survives_remote_failure(self, session, client, make_recommendation):
        client.submit_rating.side_effect = ScoringTransportError("connection refused")
        record = session.rate(make_recommendation("A"), Rating.LIKE)
        assert session.state().ratings == (record,)


class TestObservation:
    def test_subscribers_receive_updates(self, session):
        seen = []
        unsubscribe = session.subscribe(seen.append)
        session.start_workout("running")
        assert seen and seen[-1].workout.active

        count = len(seen)
        unsubscribe()
        session.pause_workout()
        assert len(seen) == count

    def test_failing_subscriber_is_isolated(self, session):
        session.subscribe(MagicMock(side_effect=RuntimeError("render failed")))
        assert session.start_workout("running") is True

    def test_connect_reports_failure(self, session, client):
        client.check_connection.return_value = False
        assert session.connect() is False
        state = session.state()
        assert not state.connected
        assert "http://scoring.test:5000" in state.last_error

    def test_connect_success(self, session, client):
        client.check_connection.return_value = True
        assert session.connect() is True
        assert session.state().connected
