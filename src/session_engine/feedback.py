"""Track rating feedback: local-first, best-effort forwarding to the service."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from datetime import datetime, timezone
from typing import Any, Callable

from scoring_client.exceptions import ScoringClientError
from session_engine.models.enums import Rating
from session_engine.models.playback import TrackRating
from session_engine.models.track import TrackRecommendation

logger = logging.getLogger(__name__)


class FeedbackRecorder:
    """Keeps the append-only rating history and forwards each rating remotely.

    The local append always happens first. Forwarding runs on *executor*; a
    failure is logged and never undoes the local record, blocks the caller
    or retries.
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
        self._ratings: list[TrackRating] = []

    @property
    def ratings(self) -> tuple[TrackRating, ...]:
        return tuple(self._ratings)

    def rate(
        self,
        track: TrackRecommendation,
        rating: Rating | str,
        context: str = "",
    ) -> TrackRating:
        """Record *rating* for *track* and forward it in the background."""
        record = TrackRating(
            track=track,
            rating=Rating(rating),
            rated_at=self._now(),
            context=context,
        )
        self._ratings.append(record)
        logger.info("Track rated: %s - %s", track.name, record.rating.value)

        self._submit(record)
        return record

    def _submit(self, record: TrackRating) -> Future | None:
        try:
            return self._executor.submit(self._forward, record)
        except RuntimeError as exc:
            # Executor already shut down
            logger.warning("Rating for %s not forwarded: %s", record.track.track_id, exc)
            return None

    def _forward(self, record: TrackRating) -> bool:
        try:
            self._client.submit_rating(record)
        except ScoringClientError as exc:
            logger.warning("Failed to send rating for %s: %s", record.track.track_id, exc)
            return False
        return True
