"""Per-symbol job state and the batch summary."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import pandas as pd

from tradescore.scoring import CompositeResult, rank_results


class JobState(str, Enum):
    """Lifecycle of one symbol within a batch run."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


TERMINAL_STATES = frozenset({JobState.SUCCEEDED, JobState.FAILED, JobState.SKIPPED})


@dataclass
class BatchJob:
    """Mutable progress record owned by the orchestrator for one run."""

    symbol: str
    attempt: int = 0
    state: JobState = JobState.PENDING
    last_error: str | None = None
    elapsed_ms: float = 0.0
    result: CompositeResult | None = None

    @property
    def retries(self) -> int:
        return max(self.attempt - 1, 0)

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES


@dataclass(frozen=True)
class FailureRecord:
    symbol: str
    error: str
    attempts: int


@dataclass(frozen=True)
class BatchSummary:
    """Outcome of a batch run.

    Parameters
    ----------
    total : int
        Symbols submitted.
    succeeded, failed, skipped : int
        Terminal-state counts; they always add up to ``total``.
    total_retries : int
        Analysis retries across all symbols.
    elapsed_seconds : float
        Wall-clock duration of the run.
    cancelled : bool
        Whether the run was cancelled or hit its deadline.
    peak_concurrency : int
        Largest number of symbols processed at the same time.
    failures : tuple[FailureRecord, ...]
        Failed symbols with their last error and attempt count.
    results : tuple[CompositeResult, ...]
        Results persisted during the run.
    """

    total: int
    succeeded: int
    failed: int
    skipped: int
    total_retries: int
    elapsed_seconds: float
    cancelled: bool = False
    peak_concurrency: int = 0
    failures: tuple[FailureRecord, ...] = ()
    results: tuple[CompositeResult, ...] = field(default=(), repr=False)

    @classmethod
    def from_jobs(
        cls,
        jobs: Sequence[BatchJob],
        elapsed_seconds: float,
        *,
        cancelled: bool = False,
        peak_concurrency: int = 0,
    ) -> BatchSummary:
        counts = Counter(job.state for job in jobs)
        return cls(
            total=len(jobs),
            succeeded=counts[JobState.SUCCEEDED],
            failed=counts[JobState.FAILED],
            skipped=counts[JobState.SKIPPED],
            total_retries=sum(job.retries for job in jobs),
            elapsed_seconds=elapsed_seconds,
            cancelled=cancelled,
            peak_concurrency=peak_concurrency,
            failures=tuple(
                FailureRecord(job.symbol, job.last_error or "unknown error", job.attempt)
                for job in jobs
                if job.state is JobState.FAILED
            ),
            results=tuple(job.result for job in jobs if job.result is not None),
        )

    @property
    def average_retries(self) -> float:
        processed = self.succeeded + self.failed
        return self.total_retries / processed if processed else 0.0

    @property
    def signal_counts(self) -> dict[str, int]:
        return dict(Counter(r.label for r in self.results))

    def top(self, n: int = 10) -> list[CompositeResult]:
        """Best *n* results by composite score."""
        return rank_results(self.results, n)

    def as_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "total_retries": self.total_retries,
            "average_retries": self.average_retries,
            "elapsed_seconds": self.elapsed_seconds,
            "cancelled": self.cancelled,
            "peak_concurrency": self.peak_concurrency,
        }

    def to_frame(self) -> pd.DataFrame:
        """One row per persisted result, best score first."""
        columns = [
            "symbol", "domain", "composite_score", "signal_label",
            "confidence", "flags", "computed_at",
        ]
        rows = []
        for result in rank_results(self.results):
            record = result.to_record()
            record["flags"] = ",".join(record["flags"])
            rows.append({c: record[c] for c in columns})
        return pd.DataFrame(rows, columns=columns)
