"""Safety screen command group."""

from __future__ import annotations

import asyncio

import typer

from cli.display import (
    batch_progress,
    error_panel,
    failures_table,
    safety_table,
    screening_summary_table,
    success_panel,
)
from cli.services import open_services, read_symbols
from tradescore.batch import RetryPolicy
from tradescore.config import Settings
from tradescore.exceptions import ConfigurationError, TradeScoreError
from tradescore.providers import AssessmentStore, FmpCompanyDataProvider
from tradescore.screening import SafetyScreener, ScreeningReport

screen_app = typer.Typer(
    name="screen", help="Safety-screen symbols to build batch universes."
)


async def _screen(
    settings: Settings,
    symbols: list[str],
    sp500: bool,
    max_concurrent: int,
    save: bool,
) -> tuple[ScreeningReport, int]:
    async with open_services(settings, remote_store=save) as services:
        if sp500:
            members = await services.fmp.fetch_sp500_constituents()
            symbols = list(dict.fromkeys([*symbols, *(m.symbol for m in members)]))

        with batch_progress() as progress:
            task_id = progress.add_task("safety screen", total=len(symbols))
            screener = SafetyScreener(
                FmpCompanyDataProvider(services.fmp),
                max_concurrent=max_concurrent,
                retry=RetryPolicy.linear(settings.max_retries, settings.retry_delay),
                on_assessed=lambda symbol: progress.update(
                    task_id, advance=1, description=symbol
                ),
            )
            report = await screener.screen(symbols)

        stored = 0
        if save and report.assessments:
            if not isinstance(services.store, AssessmentStore):
                raise ConfigurationError("result store cannot hold safety assessments")
            stored = len(await services.store.insert_assessments(report.assessments))
    return report, stored


@screen_app.command("run")
def run(
    ctx: typer.Context,
    symbols: list[str] | None = typer.Argument(None, help="Ticker symbols"),
    symbols_file: str | None = typer.Option(
        None, "--symbols-file", "-f", help="File with one symbol per line"
    ),
    sp500: bool = typer.Option(False, "--sp500", help="Screen every S&P 500 member"),
    max_concurrent: int | None = typer.Option(None, min=1, help="Parallel fetches"),
    top: int = typer.Option(20, min=0, help="Safe symbols to list"),
    show_all: bool = typer.Option(False, "--all", help="List unsafe symbols too"),
    save: bool = typer.Option(False, "--save", help="Persist assessments to the result store"),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Write safe symbols, one per line"
    ),
    csv: str | None = typer.Option(None, "--csv", help="Write every assessment to CSV"),
) -> None:
    """Check liquidity, stability and reporting before scoring."""
    settings: Settings = ctx.obj
    tickers = read_symbols(symbols, symbols_file)
    if not tickers and not sp500:
        error_panel("No symbols given; pass symbols, --symbols-file or --sp500.")
        raise typer.Exit(code=1)

    try:
        report, stored = asyncio.run(
            _screen(
                settings, tickers, sp500,
                max_concurrent or settings.max_concurrent, save,
            )
        )
    except TradeScoreError as exc:
        error_panel(str(exc))
        raise typer.Exit(code=1)

    screening_summary_table(report)
    failures_table(report)
    if show_all:
        ranked = sorted(report.assessments, key=lambda a: (-a.safety_score, a.symbol))
        safety_table(ranked, title="All assessments")
    elif top:
        safety_table(report.safe[:top], title=f"Top {top} safe to trade")
    if stored:
        success_panel(f"Stored {stored} assessments")
    if output:
        count = report.write_symbols(output)
        success_panel(f"Wrote {count} safe symbols to {output}")
    if csv:
        report.to_frame().to_csv(csv, index=False)
        success_panel(f"Wrote {len(report.assessments)} assessments to {csv}")
    if report.failures and not report.assessments:
        raise typer.Exit(code=1)
