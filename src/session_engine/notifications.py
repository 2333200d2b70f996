"""Local check-in notifications fired during playback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from session_engine.models.track import TrackRecommendation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalNotification:
    """A notification request; re-posting the same identifier replaces it."""

    identifier: str
    title: str
    body: str


class Notifier(Protocol):
    def post(self, notification: LocalNotification) -> None: ...


def midpoint_notification(track: TrackRecommendation) -> LocalNotification:
    """The mid-track check-in asking the user to rate or skip *track*."""
    return LocalNotification(
        identifier=f"halfway-notification-{track.track_id}",
        title="Music Recommendation",
        body=(
            f'How is "{track.name}" working for your workout? '
            "Rate it or get a new recommendation."
        ),
    )


class LoggingNotifier:
    """Notifier that logs notifications and keeps the latest one per identifier.

    Stands in for a platform notification center.
    """

    def __init__(self) -> None:
        self._delivered: dict[str, LocalNotification] = {}

    def post(self, notification: LocalNotification) -> None:
        self._delivered[notification.identifier] = notification
        logger.info("Notification %s: %s", notification.identifier, notification.body)

    @property
    def delivered(self) -> dict[str, LocalNotification]:
        return dict(self._delivered)
