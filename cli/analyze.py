"""Single-symbol analysis command."""

from __future__ import annotations

import asyncio

import typer

from cli.display import error_panel, result_panel, success_panel, warning_panel
from cli.services import open_services
from tradescore.config import Settings
from tradescore.exceptions import TradeScoreError
from tradescore.scoring import CompositeResult, ScoringDomain

analyze_app = typer.Typer(name="analyze", help="Score one symbol in one domain.")


async def _analyze(
    settings: Settings, domain: ScoringDomain, symbol: str, save: bool
) -> tuple[CompositeResult, str | None]:
    async with open_services(settings, remote_store=save) as services:
        result = await services.analyzer(domain)(symbol)
        row_id = await services.store.insert(result) if save else None
    return result, row_id


@analyze_app.command("run")
def run(
    ctx: typer.Context,
    domain: ScoringDomain = typer.Argument(help="Scoring domain"),
    symbol: str = typer.Argument(help="Ticker symbol (benchmark for regime)"),
    save: bool = typer.Option(False, "--save", help="Persist the result to the result store"),
) -> None:
    """Fetch inputs, score SYMBOL and print the result."""
    settings: Settings = ctx.obj
    if not settings.fmp_api_key:
        warning_panel("FMP_API_KEY is not set; data-dependent scores will be neutral.")
    try:
        result, row_id = asyncio.run(_analyze(settings, domain, symbol.upper(), save))
    except TradeScoreError as exc:
        error_panel(str(exc))
        raise typer.Exit(code=1)

    result_panel(result)
    if row_id is not None:
        success_panel(f"Stored {result.domain.value} result {row_id} for {result.symbol}")
