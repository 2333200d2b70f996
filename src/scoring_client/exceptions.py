"""Custom exception hierarchy for the scoring service client."""

from __future__ import annotations


class ScoringClientError(Exception):
    """Base exception for all scoring_client errors."""

    retryable: bool = False


class ScoringConfigError(ScoringClientError):
    """The service endpoint is malformed. Fatal: fix configuration."""


class ScoringValidationError(ScoringClientError):
    """A request body failed validation before it was sent."""


class ScoringTransportError(ScoringClientError):
    """The request never produced a usable HTTP response (network, timeout)."""

    retryable = True


class ScoringAPIError(ScoringTransportError):
    """The service answered with a non-2xx status code."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        # Client-side mistakes will not succeed on retry
        self.retryable = status_code is None or status_code >= 500 or status_code == 429


class ScoringProtocolError(ScoringClientError):
    """The response body could not be decoded against the expected schema.

    ``raw_payload`` keeps the undecoded body for diagnostics.
    """

    def __init__(self, message: str, raw_payload: str | bytes | None = None) -> None:
        super().__init__(message)
        self.raw_payload = raw_payload
