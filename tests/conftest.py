"""Shared test fixtures: recommendations, health snapshots, executors, clocks."""

from __future__ import annotations

from concurrent.futures import Executor, Future
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from session_engine.models.health import HealthSnapshot
from session_engine.models.track import (
    AudioFeatureVector,
    RecommendationBatch,
    TrackRecommendation,
)


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            result = fn(*args, **kwargs)
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future


class DeferredExecutor(Executor):
    """Holds submitted work until ``run_all()`` to simulate in-flight requests."""

    def __init__(self) -> None:
        self.pending: list[tuple[Future, Callable, tuple, dict]] = []

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_all(self) -> None:
        while self.pending:
            future, fn, args, kwargs = self.pending.pop(0)
            try:
                future.set_result(fn(*args, **kwargs))
            except BaseException as exc:
                future.set_exception(exc)


class FakeClock:
    """Controllable UTC clock; advance it manually."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 3, 14, 7, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def inline_executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture
def deferred_executor() -> DeferredExecutor:
    return DeferredExecutor()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_recommendation() -> Callable[..., TrackRecommendation]:
    """Factory fixture for TrackRecommendation instances.

    Usage:
        rec = make_recommendation("A", confidence=0.9, duration_s=100.0)
    """

    def factory(
        track_id: str = "track-1",
        confidence: float = 0.8,
        duration_s: float | None = 100.0,
        name: str | None = None,
        artist: str = "Test Artist",
    ) -> TrackRecommendation:
        return TrackRecommendation(
            track_id=track_id,
            name=name or f"Song {track_id}",
            artist=artist,
            features=AudioFeatureVector(
                energy=0.8, tempo=165.0, valence=0.6, danceability=0.7, acousticness=0.1
            ),
            similarity_score=0.85,
            ml_confidence=confidence,
            reasoning="Tempo matches running cadence",
            received_at=datetime(2026, 3, 14, 7, 30, tzinfo=timezone.utc),
            duration_s=duration_s,
        )

    return factory


@pytest.fixture
def ranked_batch(make_recommendation) -> RecommendationBatch:
    """Three tracks ranked A(0.9), B(0.7), C(0.5), each 100 s long."""
    return RecommendationBatch(
        recommendations=(
            make_recommendation("A", confidence=0.9),
            make_recommendation("B", confidence=0.7),
            make_recommendation("C", confidence=0.5),
        ),
        adaptation_strategy="Hold tempo near cadence",
    )


@pytest.fixture
def main_phase_snapshot() -> HealthSnapshot:
    """Mid-workout runner: HR 140 (zone 3), HRV 45."""
    return HealthSnapshot.from_metrics(
        heart_rate=140.0,
        hrv=45.0,
        cadence=172.0,
        recovery_index=80.0,
        training_load=300.0,
        intensity_score=7.5,
        fatigue_index=3.2,
        captured_at=datetime(2026, 3, 14, 7, 30, tzinfo=timezone.utc),
    )
