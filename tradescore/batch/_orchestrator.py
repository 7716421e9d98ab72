"""Bounded-concurrency batch driver with retries, recency skips and cancellation."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Sequence
from datetime import datetime
from typing import TypeVar

from tradescore.batch._config import BatchConfig
from tradescore.batch._jobs import BatchJob, BatchSummary, JobState
from tradescore.batch._retry import retry_async
from tradescore.providers import ResultStore
from tradescore.scoring import CompositeResult, ScoringDomain, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")

Analyzer = Callable[[str], Awaitable[CompositeResult]]


def create_batches(items: Sequence[T], batch_size: int | None) -> list[Sequence[T]]:
    """Split *items* into consecutive batches of *batch_size*."""
    if not items:
        return []
    if batch_size is None:
        return [items]
    return [items[i:i + batch_size] for i in range(0, len(items), batch_size)]


def _describe(error: BaseException) -> str:
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__


class BatchOrchestrator:
    """Analyze many symbols with a fixed-size worker pool.

    Each batch is loaded into a queue drained by ``max_concurrent``
    workers.  Per symbol the pipeline is: recency check against the
    store, analysis with retries, then persistence with its own retries.
    A failing symbol never stops the batch.

    Parameters
    ----------
    analyze : Analyzer
        Coroutine function producing a :class:`CompositeResult` for a symbol.
    store : ResultStore
        Used for the recency check and to persist results.
    domain : ScoringDomain
        Domain of the results, used for the recency lookup.
    config : BatchConfig or None
        Concurrency, retry and pacing settings.
    on_job_done : callable or None
        Called with each job as it reaches a terminal state.
    clock : callable
        Returns the current timezone-aware time.
    """

    def __init__(
        self,
        analyze: Analyzer,
        store: ResultStore,
        domain: ScoringDomain,
        config: BatchConfig | None = None,
        *,
        on_job_done: Callable[[BatchJob], None] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._analyze = analyze
        self._store = store
        self.domain = ScoringDomain(domain)
        self.config = config or BatchConfig()
        self._on_job_done = on_job_done
        self._clock = clock
        self._cancel_requested = False
        self._cancelled: asyncio.Event | None = None
        self._in_flight = 0
        self.peak_concurrency = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def cancelled(self) -> bool:
        return self._cancel_requested

    def cancel(self) -> None:
        """Stop taking new symbols and cancel the ones in flight.

        Applies to the current run, or to the next one when called
        between runs.
        """
        if not self._cancel_requested:
            logger.warning("Batch cancellation requested")
        self._stop()

    def _stop(self) -> None:
        self._cancel_requested = True
        if self._cancelled is not None:
            self._cancelled.set()

    async def run(self, symbols: Iterable[str]) -> BatchSummary:
        """Process *symbols* and return the batch summary.

        Unfinished symbols of a cancelled run are reported as failed, so
        ``succeeded + failed + skipped == total`` always holds.  Each run
        starts with a fresh cancellation state.
        """
        self._cancelled = asyncio.Event()
        if self._cancel_requested:
            self._cancelled.set()
        try:
            return await self._run(symbols)
        finally:
            self._cancel_requested = False

    async def _run(self, symbols: Iterable[str]) -> BatchSummary:
        jobs = [BatchJob(symbol) for symbol in symbols]
        batches = create_batches(jobs, self.config.batch_size)
        loop = asyncio.get_running_loop()
        deadline_at = (
            loop.time() + self.config.deadline if self.config.deadline else None
        )
        self._in_flight = 0
        self.peak_concurrency = 0
        started = time.perf_counter()

        logger.info(
            "Starting %s batch: %d symbols in %d batch(es), %d workers",
            self.domain.value, len(jobs), len(batches), self.config.max_concurrent,
        )

        for index, batch in enumerate(batches):
            if self.cancelled:
                break
            if index > 0 and self.config.inter_batch_delay > 0:
                logger.info(
                    "Batch %d/%d done, pausing %.1fs",
                    index, len(batches), self.config.inter_batch_delay,
                )
                await self._pause(self.config.inter_batch_delay, deadline_at)
                if self.cancelled:
                    break
            await self._run_batch(batch, deadline_at)

        for job in jobs:
            if not job.done:
                job.state = JobState.FAILED
                job.last_error = "cancelled"

        summary = BatchSummary.from_jobs(
            jobs,
            time.perf_counter() - started,
            cancelled=self.cancelled,
            peak_concurrency=self.peak_concurrency,
        )
        logger.info(
            "%s batch finished in %.1fs: %d succeeded, %d failed, %d skipped, %d retries",
            self.domain.value, summary.elapsed_seconds, summary.succeeded,
            summary.failed, summary.skipped, summary.total_retries,
        )
        return summary

    # ------------------------------------------------------------------
    # Worker pool
    # ------------------------------------------------------------------

    def _remaining(self, deadline_at: float | None) -> float | None:
        if deadline_at is None:
            return None
        return max(deadline_at - asyncio.get_running_loop().time(), 0.0)

    async def _pause(self, delay: float, deadline_at: float | None) -> None:
        """Sleep between batches, waking early on cancellation."""
        assert self._cancelled is not None
        remaining = self._remaining(deadline_at)
        timeout = delay if remaining is None else min(delay, remaining)
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout)
        except asyncio.TimeoutError:
            if remaining is not None and remaining <= delay:
                logger.warning("Batch deadline reached")
                self._stop()

    async def _run_batch(self, batch: Sequence[BatchJob], deadline_at: float | None) -> None:
        queue: asyncio.Queue[BatchJob] = asyncio.Queue()
        for job in batch:
            queue.put_nowait(job)

        assert self._cancelled is not None
        workers = {
            asyncio.create_task(self._worker(queue), name=f"{self.domain.value}-worker-{i}")
            for i in range(min(self.config.max_concurrent, len(batch)))
        }
        cancel_waiter = asyncio.ensure_future(self._cancelled.wait())
        try:
            while workers:
                done, _ = await asyncio.wait(
                    workers | {cancel_waiter},
                    timeout=self._remaining(deadline_at),
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if not done:
                    logger.warning("Batch deadline reached")
                    self._stop()
                    break
                if cancel_waiter in done:
                    break
                workers -= done
                for task in done:
                    task.result()
        finally:
            cancel_waiter.cancel()
            for task in workers:
                task.cancel()
            if workers:
                await asyncio.gather(*workers, return_exceptions=True)

    async def _worker(self, queue: asyncio.Queue[BatchJob]) -> None:
        while not self.cancelled:
            try:
                job = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            await self._process(job)

    # ------------------------------------------------------------------
    # Per-symbol pipeline
    # ------------------------------------------------------------------

    async def _process(self, job: BatchJob) -> None:
        started = time.perf_counter()
        self._in_flight += 1
        self.peak_concurrency = max(self.peak_concurrency, self._in_flight)
        try:
            await self._pipeline(job)
        except Exception as exc:
            job.state = JobState.FAILED
            job.last_error = _describe(exc)
            logger.exception("%s failed unexpectedly", job.symbol)
        finally:
            self._in_flight -= 1
            job.elapsed_ms = (time.perf_counter() - started) * 1000.0
            if job.done:
                self._notify(job)

    async def _pipeline(self, job: BatchJob) -> None:
        if await self._recently_analyzed(job.symbol):
            job.state = JobState.SKIPPED
            return
        if self.config.request_delay > 0:
            await asyncio.sleep(self.config.request_delay)
        result = await self._analyze_with_retry(job)
        if result is not None:
            await self._persist(job, result)

    def _notify(self, job: BatchJob) -> None:
        if self._on_job_done is None:
            return
        try:
            self._on_job_done(job)
        except Exception:
            logger.exception("on_job_done callback failed for %s", job.symbol)

    async def _recently_analyzed(self, symbol: str) -> bool:
        window = self.config.recency_window
        if not window:
            return False
        try:
            latest = await self._store.get_latest(symbol, self.domain)
        except Exception as exc:
            logger.warning(
                "Recency lookup for %s failed (%s); analyzing anyway", symbol, exc
            )
            return False
        if latest is None:
            return False
        age = self._clock() - latest.computed_at
        if age < window:
            logger.info("Skipping %s: analyzed %s ago", symbol, age)
            return True
        return False

    async def _analyze_with_retry(self, job: BatchJob) -> CompositeResult | None:
        policy = self.config.retry

        async def attempt() -> CompositeResult:
            job.attempt += 1
            job.state = JobState.RUNNING
            return await self._analyze(job.symbol)

        def on_retry(retry: int, error: BaseException, delay: float) -> None:
            job.state = JobState.FAILED
            job.last_error = _describe(error)
            logger.warning(
                "%s attempt %d/%d failed: %s; retrying in %.1fs",
                job.symbol, retry, policy.max_attempts, job.last_error, delay,
            )

        try:
            return await retry_async(attempt, policy, on_retry=on_retry)
        except Exception as exc:
            job.state = JobState.FAILED
            job.last_error = _describe(exc)
            logger.error(
                "%s failed after %d attempt(s): %s",
                job.symbol, job.attempt, job.last_error,
            )
            return None

    async def _persist(self, job: BatchJob, result: CompositeResult) -> None:
        def on_retry(retry: int, error: BaseException, delay: float) -> None:
            logger.warning(
                "Storing %s failed (%s); retry %d in %.1fs",
                job.symbol, error, retry, delay,
            )

        try:
            await retry_async(
                lambda: self._store.insert(result),
                self.config.persist_retry,
                should_retry=lambda _: True,
                on_retry=on_retry,
            )
        except Exception as exc:
            job.state = JobState.FAILED
            job.last_error = f"persistence failed: {_describe(exc)}"
            logger.error("%s: %s", job.symbol, job.last_error)
            return
        job.result = result
        job.state = JobState.SUCCEEDED
        logger.info(
            "%s: %s (score %.3f, confidence %.2f)",
            job.symbol, result.label, result.composite_score, result.confidence,
        )
