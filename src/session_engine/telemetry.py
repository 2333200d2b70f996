"""Best-effort telemetry: event-tagged payloads sent off the caller's thread."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from datetime import datetime, timezone
from typing import Any, Callable

from scoring_client.exceptions import ScoringClientError
from session_engine.models.health import HealthSnapshot
from session_engine.models.track import TrackRecommendation
from session_engine.serialization.scoring import (
    to_health_data_event,
    to_snapshot_event,
    to_track_started_event,
)

logger = logging.getLogger(__name__)


class TelemetryChannel:
    """Fire-and-forget sender for ``/api/health-data`` events.

    Sends never raise and never block the caller: each payload is handed to
    *executor* and failures are logged.
    """

    def __init__(
        self,
        client: Any,
        executor: Executor,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._executor = executor
        self._now = now or (lambda: datetime.now(timezone.utc))

    def emit(self, event: str, **fields: Any) -> Future | None:
        """Send an event-tagged payload stamped with the current time."""
        return self.send(to_health_data_event(event, self._now(), **fields))

    def track_started(self, recommendation: TrackRecommendation) -> Future | None:
        return self.send(to_track_started_event(recommendation, self._now()))

    def snapshot(self, snapshot: HealthSnapshot) -> Future | None:
        return self.send(to_snapshot_event(snapshot))

    def send(self, payload: dict[str, Any]) -> Future | None:
        try:
            return self._executor.submit(self._deliver, payload)
        except RuntimeError as exc:
            # Executor already shut down
            logger.warning("Dropped %s event: %s", payload.get("event"), exc)
            return None

    def _deliver(self, payload: dict[str, Any]) -> bool:
        try:
            self._client.send_health_data(payload)
        except ScoringClientError as exc:
            logger.warning("Failed to send %s event: %s", payload.get("event"), exc)
            return False
        return True
