"""Batch analysis command group."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from datetime import timedelta

import typer

from cli.display import (
    batch_progress,
    error_panel,
    failures_table,
    ranking_table,
    success_panel,
    summary_table,
)
from cli.services import open_services, read_symbols
from tradescore.batch import BatchConfig, BatchJob, BatchOrchestrator, BatchSummary, RetryPolicy
from tradescore.config import Settings
from tradescore.exceptions import TradeScoreError
from tradescore.scoring import ScoringDomain

logger = logging.getLogger(__name__)

batch_app = typer.Typer(name="batch", help="Score many symbols concurrently.")


async def _run_batch(
    settings: Settings,
    domain: ScoringDomain,
    symbols: list[str],
    config: BatchConfig,
    dry_run: bool,
) -> BatchSummary:
    async with open_services(settings, remote_store=not dry_run) as services:
        with batch_progress() as progress:
            task_id = progress.add_task(f"{domain.value} batch", total=len(symbols))

            def on_job_done(job: BatchJob) -> None:
                progress.update(
                    task_id, advance=1, description=f"{job.symbol}: {job.state.value}"
                )

            orchestrator = BatchOrchestrator(
                services.analyzer(domain),
                services.store,
                domain,
                config,
                on_job_done=on_job_done,
            )
            loop = asyncio.get_running_loop()
            try:
                loop.add_signal_handler(signal.SIGINT, orchestrator.cancel)
            except (NotImplementedError, RuntimeError):
                logger.debug("Signal handlers unavailable; Ctrl-C aborts immediately")
            try:
                return await orchestrator.run(symbols)
            finally:
                with contextlib.suppress(NotImplementedError, RuntimeError):
                    loop.remove_signal_handler(signal.SIGINT)


@batch_app.command("run")
def run(
    ctx: typer.Context,
    domain: ScoringDomain = typer.Argument(help="Scoring domain"),
    symbols: list[str] | None = typer.Argument(None, help="Ticker symbols"),
    symbols_file: str | None = typer.Option(
        None, "--symbols-file", "-f", help="File with one symbol per line"
    ),
    max_concurrent: int | None = typer.Option(None, min=1, help="Parallel workers"),
    max_retries: int | None = typer.Option(None, min=0, help="Retries per symbol"),
    retry_delay: float | None = typer.Option(
        None, min=0, help="Seconds; retry n waits n times this"
    ),
    recency_hours: float | None = typer.Option(
        None, min=0, help="Skip symbols analyzed within this many hours (0 disables)"
    ),
    batch_size: int | None = typer.Option(None, min=1, help="Symbols per batch"),
    inter_batch_delay: float | None = typer.Option(None, min=0, help="Seconds between batches"),
    request_delay: float | None = typer.Option(None, min=0, help="Seconds before each symbol"),
    deadline: float | None = typer.Option(None, min=1, help="Cancel the run after N seconds"),
    top: int = typer.Option(10, min=0, help="Size of the ranking"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Keep results in memory only"),
    output: str | None = typer.Option(None, "--output", "-o", help="Write results to CSV"),
) -> None:
    """Analyze SYMBOLS with bounded concurrency, retries and recency skips."""
    settings: Settings = ctx.obj
    tickers = read_symbols(symbols, symbols_file)
    if not tickers:
        error_panel("No symbols given.")
        raise typer.Exit(code=1)

    base = BatchConfig.from_settings(settings)
    retries = base.max_retries if max_retries is None else max_retries
    delay = base.retry.base_delay if retry_delay is None else retry_delay
    if recency_hours is None:
        recency = base.recency_window
    else:
        recency = timedelta(hours=recency_hours) if recency_hours > 0 else None

    try:
        config = BatchConfig(
            max_concurrent=max_concurrent or base.max_concurrent,
            retry=RetryPolicy.linear(retries, delay),
            recency_window=recency,
            request_delay=base.request_delay if request_delay is None else request_delay,
            batch_size=batch_size or base.batch_size,
            inter_batch_delay=(
                base.inter_batch_delay if inter_batch_delay is None else inter_batch_delay
            ),
            deadline=deadline,
        )
        summary = asyncio.run(_run_batch(settings, domain, tickers, config, dry_run))
    except TradeScoreError as exc:
        error_panel(str(exc))
        raise typer.Exit(code=1)

    summary_table(summary)
    failures_table(summary)
    if top:
        ranking_table(summary.top(top), title=f"Top {top} by composite score")
    if output:
        summary.to_frame().to_csv(output, index=False)
        success_panel(f"Wrote {len(summary.results)} results to {output}")
    if summary.failed and not summary.succeeded:
        raise typer.Exit(code=1)
