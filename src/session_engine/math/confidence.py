"""Confidence and audio-feature bounding helpers (numpy-backed)."""

from __future__ import annotations

import math
from collections.abc import Iterable

import numpy as np


def overall_confidence(confidences: Iterable[float]) -> float:
    """Arithmetic mean of per-track confidences; 0.0 for an empty batch."""
    values = np.fromiter(confidences, dtype=float)
    if values.size == 0:
        return 0.0
    return float(np.mean(values))


def clamp_unit(value: float) -> float:
    """Clamp *value* into [0, 1]. Raises ValueError for NaN/inf."""
    if not math.isfinite(value):
        raise ValueError(f"non-finite value: {value!r}")
    return float(np.clip(value, 0.0, 1.0))


def clamp_non_negative(value: float) -> float:
    """Clamp *value* to be >= 0. Raises ValueError for NaN/inf."""
    if not math.isfinite(value):
        raise ValueError(f"non-finite value: {value!r}")
    return float(max(0.0, value))

