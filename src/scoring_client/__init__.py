"""Scoring service client: all network I/O to the recommendation backend lives here."""

from scoring_client.client import ScoringClient
from scoring_client.exceptions import (
    ScoringAPIError,
    ScoringClientError,
    ScoringConfigError,
    ScoringProtocolError,
    ScoringTransportError,
    ScoringValidationError,
)
from scoring_client.response_mapper import map_real_time_data, map_recommendation_response

__all__ = [
    "ScoringClient",
    "ScoringAPIError",
    "ScoringClientError",
    "ScoringConfigError",
    "ScoringProtocolError",
    "ScoringTransportError",
    "ScoringValidationError",
    "map_real_time_data",
    "map_recommendation_response",
]
