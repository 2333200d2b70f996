"""HTTP client for the external music scoring service.

Every call carries a bounded timeout. Transport problems surface as
``ScoringTransportError`` (retryable), undecodable bodies as
``ScoringProtocolError`` with the raw payload attached.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

import requests

from scoring_client.exceptions import (
    ScoringAPIError,
    ScoringClientError,
    ScoringConfigError,
    ScoringProtocolError,
    ScoringTransportError,
    ScoringValidationError,
)
from scoring_client.response_mapper import map_real_time_data, map_recommendation_response
from session_engine.models.enums import WorkoutPhase
from session_engine.models.health import HealthSnapshot
from session_engine.models.playback import TrackRating
from session_engine.models.track import RealTimeAnalytics, RecommendationBatch
from session_engine.serialization.scoring import (
    to_rating_payload,
    to_recommendation_request,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_TIMEOUT_S = 10.0

RECOMMENDATIONS_PATH = "/api/ml-recommendations"
HEALTH_DATA_PATH = "/api/health-data"
TRACK_RATING_PATH = "/api/track-rating"
REAL_TIME_DATA_PATH = "/api/real-time-data"
ANALYTICS_PATH = "/api/analytics"


class ScoringClient:
    """Facade over the scoring service's REST endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = _validate_base_url(base_url)
        if timeout_s <= 0:
            raise ScoringConfigError(f"Timeout must be positive, got {timeout_s}")
        self._timeout_s = timeout_s
        self._http = session or requests.Session()
        self._http.headers.update({"Accept": "application/json"})

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    def request_recommendations(
        self,
        snapshot: HealthSnapshot,
        phase: WorkoutPhase | str = WorkoutPhase.MAIN,
    ) -> RecommendationBatch:
        """Ask the service for tracks suited to *snapshot* during *phase*.

        Returns a fresh batch in server rank order. The caller decides
        whether it replaces the active queue.
        """
        phase = _coerce_phase(phase)
        bad = snapshot.invalid_fields()
        if bad:
            raise ScoringValidationError(
                f"Health snapshot has non-finite or invalid fields: {', '.join(bad)}"
            )

        body = to_recommendation_request(snapshot, phase)
        resp = self._request("POST", RECOMMENDATIONS_PATH, json=body)
        raw = self._decode_json(resp)
        try:
            batch = map_recommendation_response(raw)
        except ScoringProtocolError as exc:
            raise ScoringProtocolError(str(exc), raw_payload=resp.text) from exc

        logger.info(
            "Received %d recommendations for phase=%s (confidence %.2f)",
            len(batch),
            phase.value,
            batch.overall_confidence,
        )
        return batch

    # ------------------------------------------------------------------
    # Feedback and telemetry
    # ------------------------------------------------------------------

    def submit_rating(self, rating: TrackRating) -> None:
        """Forward a user rating so the service can adapt future picks."""
        self._request("POST", TRACK_RATING_PATH, json=to_rating_payload(rating))
        logger.debug("Rating %s sent for track %s", rating.rating.value, rating.track.track_id)

    def send_health_data(self, payload: dict[str, Any]) -> None:
        """Post an event-tagged telemetry payload."""
        self._request("POST", HEALTH_DATA_PATH, json=payload)
        logger.debug("Sent %s event", payload.get("event", "health data"))

    # ------------------------------------------------------------------
    # Live data and connectivity
    # ------------------------------------------------------------------

    def fetch_real_time_data(self) -> RealTimeAnalytics:
        """Pull the service's latest real-time metrics."""
        resp = self._request("GET", REAL_TIME_DATA_PATH)
        raw = self._decode_json(resp)
        try:
            return map_real_time_data(raw)
        except ScoringProtocolError as exc:
            raise ScoringProtocolError(str(exc), raw_payload=resp.text) from exc

    def check_connection(self) -> bool:
        """Return True if the service answers its analytics endpoint."""
        try:
            self._request("GET", ANALYTICS_PATH)
        except ScoringClientError as exc:
            logger.warning("Scoring service unreachable at %s: %s", self._base_url, exc)
            return False
        logger.info("Connected to scoring service at %s", self._base_url)
        return True

    def close(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send one request with the configured timeout and map failures."""
        url = f"{self._base_url}{path}"
        try:
            resp = self._http.request(method, url, timeout=self._timeout_s, **kwargs)
        except requests.exceptions.Timeout as exc:
            raise ScoringTransportError(
                f"{method} {path} timed out after {self._timeout_s:g}s"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise ScoringTransportError(f"{method} {path} failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            raise ScoringAPIError(
                f"{method} {path} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp

    @staticmethod
    def _decode_json(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise ScoringProtocolError(
                f"Response is not valid JSON: {exc}", raw_payload=resp.text
            ) from exc


def _validate_base_url(base_url: str) -> str:
    """Reject endpoints that cannot possibly work. Returns the URL without a trailing slash."""
    if not isinstance(base_url, str) or not base_url.strip():
        raise ScoringConfigError("Scoring service URL is empty")
    parsed = urlparse(base_url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ScoringConfigError(f"Invalid scoring service URL: {base_url!r}")
    return base_url.strip().rstrip("/")


def _coerce_phase(phase: WorkoutPhase | str) -> WorkoutPhase:
    try:
        return WorkoutPhase(phase)
    except ValueError as exc:
        raise ScoringValidationError(f"Unknown workout phase: {phase!r}") from exc
