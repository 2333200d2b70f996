"""Workout lifecycle reducer.

Each function takes the current :class:`WorkoutState` and returns the next
one. Phase changes are threshold checks on accumulated active time, so a
paused workout simply stops accumulating and no delayed callback is left
behind.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime

from session_engine.models.enums import MAIN_PHASE_AFTER_S, WorkoutPhase, WorkoutType
from session_engine.models.workout import WorkoutState


def start(state: WorkoutState, workout_type: WorkoutType, at: datetime) -> WorkoutState:
    """Begin a workout in the warmup phase. No-op if one is already active."""
    if state.active:
        return state
    return WorkoutState(
        active=True,
        paused=False,
        workout_type=WorkoutType(workout_type),
        started_at=at,
        elapsed_s=0.0,
        phase=WorkoutPhase.WARMUP,
    )


def pause(state: WorkoutState) -> WorkoutState:
    if not state.is_running:
        return state
    return dataclasses.replace(state, paused=True)


def resume(state: WorkoutState) -> WorkoutState:
    if not (state.active and state.paused):
        return state
    return dataclasses.replace(state, paused=False)


def end(state: WorkoutState, at: datetime) -> WorkoutState:
    """Finish the workout; the phase becomes cooldown."""
    if not state.active:
        return state
    return dataclasses.replace(
        state,
        active=False,
        paused=False,
        ended_at=at,
        phase=WorkoutPhase.COOLDOWN,
    )


def to_cooldown(state: WorkoutState) -> WorkoutState:
    return dataclasses.replace(state, phase=WorkoutPhase.COOLDOWN)


def advance(
    state: WorkoutState,
    seconds: float,
    main_phase_after_s: float = MAIN_PHASE_AFTER_S,
) -> WorkoutState:
    """Accumulate active time and move warmup → main once the threshold passes."""
    if seconds < 0:
        raise ValueError(f"Workout clock cannot move backwards ({seconds}s)")
    if not state.is_running:
        return state

    elapsed = state.elapsed_s + seconds
    phase = state.phase
    if phase == WorkoutPhase.WARMUP and elapsed >= main_phase_after_s:
        phase = WorkoutPhase.MAIN
    return dataclasses.replace(state, elapsed_s=elapsed, phase=phase)


def format_duration(seconds: float) -> str:
    """``M:SS`` under an hour, ``H:MM:SS`` otherwise."""
    total = int(seconds)
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
