"""Concurrent batch orchestration with retry policies."""

from tradescore.batch._config import BackoffStrategy, BatchConfig, RetryPolicy
from tradescore.batch._jobs import (
    TERMINAL_STATES,
    BatchJob,
    BatchSummary,
    FailureRecord,
    JobState,
)
from tradescore.batch._orchestrator import Analyzer, BatchOrchestrator, create_batches
from tradescore.batch._retry import retry_async

__all__ = [
    "TERMINAL_STATES",
    "Analyzer",
    "BackoffStrategy",
    "BatchConfig",
    "BatchJob",
    "BatchOrchestrator",
    "BatchSummary",
    "FailureRecord",
    "JobState",
    "RetryPolicy",
    "create_batches",
    "retry_async",
]
