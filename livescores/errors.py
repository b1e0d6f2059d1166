"""Error taxonomy for the live-score cache."""

from __future__ import annotations


class ScoreError(RuntimeError):
    """Base class for every error raised by the live-score subsystem."""


class ValidationError(ScoreError):
    """Bad input: unknown sport or status, inverted or oversized date range."""


class NotFoundError(ScoreError):
    """The requested game is neither cached nor known to the provider."""


class ProviderError(ScoreError):
    """The external sports-data source failed (network, timeout, auth, plan or quota)."""

    def __init__(self, message: str, *, status: int | None = None, reason: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason


class StoreError(ScoreError):
    """The persistence layer could not be read or written."""
