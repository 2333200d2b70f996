"""Environment-variable-based configuration for the session runner."""

from __future__ import annotations

import os

SCORING_SERVICE_URL: str = os.environ.get("SCORING_SERVICE_URL", "http://localhost:5000")
SCORING_TIMEOUT_S: float = float(os.environ.get("SCORING_TIMEOUT_S", "10"))
TICK_INTERVAL_S: float = float(os.environ.get("TICK_INTERVAL_S", "1"))
SNAPSHOT_INTERVAL_S: float = float(os.environ.get("SNAPSHOT_INTERVAL_S", "2"))
REFRESH_INTERVAL_S: float = float(os.environ.get("REFRESH_INTERVAL_S", "30"))
DEFAULT_TRACK_DURATION_S: float = float(os.environ.get("DEFAULT_TRACK_DURATION_S", "180"))
MAIN_PHASE_AFTER_S: float = float(os.environ.get("MAIN_PHASE_AFTER_S", "300"))
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
