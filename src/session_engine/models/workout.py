"""Frozen workout lifecycle state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from session_engine.models.enums import WorkoutPhase, WorkoutType


@dataclass(frozen=True)
class WorkoutState:
    """Where the current workout stands.

    ``elapsed_s`` counts only active, unpaused seconds.
    """

    active: bool = False
    paused: bool = False
    workout_type: WorkoutType | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None
    elapsed_s: float = 0.0
    phase: WorkoutPhase = WorkoutPhase.WARMUP

    @property
    def is_running(self) -> bool:
        """True while the clock should advance."""
        return self.active and not self.paused
