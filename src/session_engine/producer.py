"""Health snapshot production from pluggable metric sources."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from scoring_client.exceptions import ScoringClientError
from session_engine.models.health import HealthSnapshot

logger = logging.getLogger(__name__)

# Resting-state values used before any reading arrives.
BASELINE_METRICS: dict[str, float] = {
    "heart_rate": 75.0,
    "hrv": 42.0,
    "cadence": 180.0,
    "recovery_index": 85.0,
    "training_load": 280.0,
    "intensity_score": 7.2,
    "fatigue_index": 3.1,
}

# Fluctuation ranges for simulated sensors (inclusive).
SIMULATED_RANGES: dict[str, tuple[float, float]] = {
    "heart_rate": (70.0, 85.0),
    "hrv": (35.0, 55.0),
    "cadence": (170.0, 190.0),
    "recovery_index": (75.0, 95.0),
    "training_load": (250.0, 350.0),
    "intensity_score": (6.0, 8.5),
    "fatigue_index": (2.0, 4.0),
}


class MetricsSource(Protocol):
    def read(self) -> dict[str, float]: ...


class SimulatedMetricsSource:
    """Random readings within plausible ranges, for demos and tests."""

    def __init__(
        self,
        seed: int | None = None,
        ranges: dict[str, tuple[float, float]] | None = None,
    ) -> None:
        self._rng = random.Random(seed)
        self._ranges = dict(ranges or SIMULATED_RANGES)

    def read(self) -> dict[str, float]:
        return {key: self._rng.uniform(lo, hi) for key, (lo, hi) in self._ranges.items()}


class RealTimeMetricsSource:
    """Readings pulled from the scoring service's real-time endpoint.

    The endpoint does not report cadence, training load or fatigue; those
    keep their last known (initially baseline) values.
    """

    def __init__(self, client: Any, baseline: dict[str, float] | None = None) -> None:
        self._client = client
        self._last = dict(baseline or BASELINE_METRICS)

    def read(self) -> dict[str, float]:
        analytics = self._client.fetch_real_time_data()
        self._last.update(
            heart_rate=analytics.heart_rate,
            hrv=analytics.hrv,
            recovery_index=analytics.recovery_index,
            intensity_score=analytics.intensity_score,
        )
        return dict(self._last)


class HealthSnapshotProducer:
    """Turns metric readings into immutable HealthSnapshots.

    Call :meth:`sample` on demand, or :meth:`poll` from a periodic job.
    """

    def __init__(
        self,
        source: MetricsSource,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._source = source
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._latest: HealthSnapshot | None = None

    @property
    def latest(self) -> HealthSnapshot | None:
        """Most recent snapshot, or None before the first sample."""
        return self._latest

    def sample(self) -> HealthSnapshot:
        """Read the source and publish a fresh snapshot."""
        metrics = self._source.read()
        snapshot = HealthSnapshot.from_metrics(captured_at=self._now(), **metrics)
        self._latest = snapshot
        logger.debug(
            "Snapshot hr=%.0f hrv=%.0f zone=%d",
            snapshot.heart_rate,
            snapshot.hrv,
            snapshot.performance_zone,
        )
        return snapshot

    def poll(self) -> HealthSnapshot | None:
        """Like :meth:`sample`, but keeps the last known snapshot on source failure."""
        try:
            return self.sample()
        except ScoringClientError as exc:
            logger.warning("Health sample failed, keeping last snapshot: %s", exc)
            return self._latest

    def current(self) -> HealthSnapshot:
        """Latest snapshot, sampling first if none exists yet."""
        return self._latest if self._latest is not None else self.sample()
