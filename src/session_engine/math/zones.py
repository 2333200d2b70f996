"""Performance zone classification from heart rate.

Fixed absolute thresholds (bpm): <114 Z1, <133 Z2, <152 Z3, <171 Z4, else Z5.
Comparisons are strict less-than against ascending bounds, so a reading that
sits exactly on a boundary belongs to the higher zone.
"""

from __future__ import annotations

from session_engine.models.enums import (
    RESTING_FALLBACK_HR_BPM,
    ZONE_UPPER_BOUNDS_BPM,
    PerformanceZone,
)


def performance_zone(heart_rate: float) -> PerformanceZone:
    """Classify *heart_rate* into a 1-5 performance zone.

    A non-positive reading means no sensor data yet and is treated as a
    resting heart rate.

    Examples:
        >>> int(performance_zone(113.9)), int(performance_zone(114))
        (1, 2)
    """
    hr = heart_rate if heart_rate > 0 else RESTING_FALLBACK_HR_BPM
    for upper_bound, zone in ZONE_UPPER_BOUNDS_BPM:
        if hr < upper_bound:
            return zone
    return PerformanceZone.ZONE_5


def zone_label(zone: int) -> str:
    """Human-readable name for a performance zone."""
    return _ZONE_LABELS.get(zone, "Unknown Zone")


_ZONE_LABELS = {
    PerformanceZone.ZONE_1: "Recovery Zone",
    PerformanceZone.ZONE_2: "Aerobic Zone",
    PerformanceZone.ZONE_3: "Threshold Zone",
    PerformanceZone.ZONE_4: "Anaerobic Zone",
    PerformanceZone.ZONE_5: "Maximal Zone",
}
