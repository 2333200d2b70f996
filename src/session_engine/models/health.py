"""Frozen health snapshot, the physiological input to a recommendation request."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone

from session_engine.math import zones

_METRIC_FIELDS = (
    "heart_rate",
    "hrv",
    "cadence",
    "recovery_index",
    "training_load",
    "intensity_score",
    "fatigue_index",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class HealthSnapshot:
    """Point-in-time bundle of physiological metrics.

    ``performance_zone`` is always derived from ``heart_rate``; build
    instances with :meth:`from_metrics` so the two cannot disagree.
    """

    heart_rate: float  # bpm
    hrv: float  # ms
    cadence: float  # steps/min
    recovery_index: float  # 0-100
    training_load: float
    intensity_score: float
    fatigue_index: float
    performance_zone: int
    captured_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_metrics(
        cls,
        heart_rate: float,
        hrv: float,
        cadence: float,
        recovery_index: float,
        training_load: float,
        intensity_score: float,
        fatigue_index: float,
        captured_at: datetime | None = None,
    ) -> HealthSnapshot:
        """Create a snapshot, deriving the performance zone from heart rate."""
        return cls(
            heart_rate=float(heart_rate),
            hrv=float(hrv),
            cadence=float(cadence),
            recovery_index=float(recovery_index),
            training_load=float(training_load),
            intensity_score=float(intensity_score),
            fatigue_index=float(fatigue_index),
            performance_zone=int(zones.performance_zone(heart_rate)),
            captured_at=captured_at or _utcnow(),
        )

    def invalid_fields(self) -> list[str]:
        """Names of metric fields that are not finite numbers."""
        bad: list[str] = []
        for name in _METRIC_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                bad.append(name)
            elif not math.isfinite(value):
                bad.append(name)
        if self.performance_zone not in (1, 2, 3, 4, 5):
            bad.append("performance_zone")
        return bad

    def metrics(self) -> dict[str, float]:
        """Metric fields as a flat dict (no timestamp)."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "captured_at"
        }
