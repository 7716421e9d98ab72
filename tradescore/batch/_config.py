"""Retry policies and batch-run configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import TYPE_CHECKING

from tradescore.exceptions import ConfigurationError

if TYPE_CHECKING:
    from tradescore.config import Settings


class BackoffStrategy(str, Enum):
    """How the delay grows between consecutive retries."""

    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry schedule consumed by :func:`retry_async`.

    Parameters
    ----------
    max_attempts : int
        Total number of attempts, including the first.
    base_delay : float
        Delay in seconds before the first retry.
    backoff_multiplier : float
        Growth factor for the exponential strategy.
    strategy : BackoffStrategy
        FIXED waits ``base_delay``; LINEAR waits ``base_delay * n`` before
        retry *n*; EXPONENTIAL waits ``base_delay * multiplier**(n - 1)``.
    max_delay : float
        Upper bound on any single delay.
    jitter : bool
        Sample each delay uniformly from ``[0, delay]`` (full jitter).
    """

    max_attempts: int = 4
    base_delay: float = 2.0
    backoff_multiplier: float = 2.0
    strategy: BackoffStrategy = BackoffStrategy.LINEAR
    max_delay: float = 120.0
    jitter: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError(
                f"max_attempts must be at least 1, got {self.max_attempts}"
            )
        if self.base_delay < 0 or self.max_delay < 0:
            raise ConfigurationError("retry delays must be non-negative")
        if self.backoff_multiplier < 1:
            raise ConfigurationError(
                f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}"
            )

    @property
    def max_retries(self) -> int:
        return self.max_attempts - 1

    def delay_for(self, retry: int) -> float:
        """Deterministic delay in seconds before retry number *retry* (1-based)."""
        if self.strategy is BackoffStrategy.FIXED:
            delay = self.base_delay
        elif self.strategy is BackoffStrategy.LINEAR:
            delay = self.base_delay * retry
        else:
            delay = self.base_delay * self.backoff_multiplier ** (retry - 1)
        return min(delay, self.max_delay)

    # -- factory methods -----------------------------------------------------

    @classmethod
    def linear(cls, max_retries: int, delay: float) -> RetryPolicy:
        """``delay * n`` before retry *n*."""
        return cls(max_attempts=max_retries + 1, base_delay=delay)

    @classmethod
    def fixed(cls, max_retries: int, delay: float) -> RetryPolicy:
        return cls(
            max_attempts=max_retries + 1,
            base_delay=delay,
            strategy=BackoffStrategy.FIXED,
        )

    @classmethod
    def exponential(
        cls, max_retries: int, base_delay: float = 2.0, max_delay: float = 120.0
    ) -> RetryPolicy:
        """Exponential backoff with full jitter."""
        return cls(
            max_attempts=max_retries + 1,
            base_delay=base_delay,
            strategy=BackoffStrategy.EXPONENTIAL,
            max_delay=max_delay,
            jitter=True,
        )

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        return cls(max_attempts=1, base_delay=0.0)

    @classmethod
    def for_persistence(cls) -> RetryPolicy:
        """Two retries one second apart."""
        return cls.fixed(max_retries=2, delay=1.0)


@dataclass(frozen=True)
class BatchConfig:
    """Configuration for one :class:`BatchOrchestrator` run.

    Parameters
    ----------
    max_concurrent : int
        Number of workers, i.e. symbols analyzed at once.
    retry : RetryPolicy
        Per-symbol analysis retries.
    recency_window : timedelta or None
        Skip symbols analyzed more recently than this.  ``None`` disables
        the check.
    request_delay : float
        Pause in seconds before each symbol's first attempt.
    batch_size : int or None
        Symbols per batch; ``None`` runs everything as one batch.
    inter_batch_delay : float
        Pause in seconds between batches.
    persist_retry : RetryPolicy
        Retries for storing a result, independent of ``retry``.
    deadline : float or None
        Seconds after which the run is cancelled.
    """

    max_concurrent: int = 3
    retry: RetryPolicy = field(default_factory=lambda: RetryPolicy.linear(3, 2.0))
    recency_window: timedelta | None = timedelta(hours=1)
    request_delay: float = 0.5
    batch_size: int | None = None
    inter_batch_delay: float = 3.0
    persist_retry: RetryPolicy = field(default_factory=RetryPolicy.for_persistence)
    deadline: float | None = None

    def __post_init__(self) -> None:
        if self.max_concurrent < 1:
            raise ConfigurationError(
                f"max_concurrent must be at least 1, got {self.max_concurrent}"
            )
        if self.batch_size is not None and self.batch_size < 1:
            raise ConfigurationError(
                f"batch_size must be positive, got {self.batch_size}"
            )
        if self.request_delay < 0 or self.inter_batch_delay < 0:
            raise ConfigurationError("pacing delays must be non-negative")
        if self.deadline is not None and self.deadline <= 0:
            raise ConfigurationError(f"deadline must be positive, got {self.deadline}")

    @property
    def max_retries(self) -> int:
        return self.retry.max_retries

    # -- factory methods -----------------------------------------------------

    @classmethod
    def for_timing_batches(cls) -> BatchConfig:
        """Batches of 15 with three retries five seconds apart."""
        return cls(
            retry=RetryPolicy.fixed(max_retries=3, delay=5.0),
            batch_size=15,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> BatchConfig:
        recency = (
            timedelta(hours=settings.recency_hours)
            if settings.recency_hours > 0
            else None
        )
        return cls(
            max_concurrent=settings.max_concurrent,
            retry=RetryPolicy.linear(settings.max_retries, settings.retry_delay),
            recency_window=recency,
            request_delay=settings.request_delay,
            batch_size=settings.batch_size,
            inter_batch_delay=settings.inter_batch_delay,
        )
