"""Custom exception hierarchy for the tradescore library."""

from __future__ import annotations


class TradeScoreError(Exception):
    """Base exception for all tradescore library errors."""


class ConfigurationError(TradeScoreError):
    """Invalid configuration parameters or missing required arguments."""


class DataError(TradeScoreError):
    """Invalid input data: unordered bars, negative volume, bad columns."""

    retryable = False


class DataSourceError(TradeScoreError):
    """A data-source collaborator failed to deliver usable data.

    Parameters
    ----------
    source : str
        Short name of the failing source (e.g. ``"fmp"``).
    message : str
        Human-readable description.
    """

    retryable: bool = True

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"[{source}] {message}")
        self.source = source
        self.message = message


class MissingCredentialError(DataSourceError):
    """API key for the source is not configured."""

    retryable = False

    def __init__(self, source: str, setting: str) -> None:
        super().__init__(source, f"missing credential {setting}")
        self.setting = setting


class RateLimitedError(DataSourceError):
    """The source throttled the request."""

    def __init__(
        self, source: str, message: str = "rate limit exceeded",
        retry_after: float | None = None,
    ) -> None:
        super().__init__(source, message)
        self.retry_after = retry_after


class InvalidResponseFormatError(DataSourceError):
    """The source answered with an unexpected payload shape."""


class NotFoundError(DataSourceError):
    """The source has no data for the requested symbol."""

    retryable = False


class DataUnavailableError(DataSourceError):
    """Transport failure or server-side error at the source."""


class PersistenceError(TradeScoreError):
    """The result store rejected or failed an operation."""


def is_retryable(error: BaseException) -> bool:
    """Whether *error* is worth another attempt.

    Errors carrying ``retryable = False`` stop immediately; anything else,
    including unexpected exceptions, is retried.
    """
    return getattr(error, "retryable", True)
