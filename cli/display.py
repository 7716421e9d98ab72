"""Rich rendering helpers for CLI output (single-responsibility display layer)."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from tradescore.batch import BatchSummary
from tradescore.scoring import CompositeResult, Signal, WeightVector
from tradescore.screening import RiskLevel, SafetyAssessment, ScreeningReport

console = Console()

_RISK_STYLES: dict[RiskLevel, str] = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
    RiskLevel.VERY_HIGH: "bold red",
}

_SIGNAL_STYLES: dict[Signal, str] = {
    Signal.STRONG_BUY: "bold green",
    Signal.BUY: "green",
    Signal.HOLD: "yellow",
    Signal.SELL: "red",
    Signal.STRONG_SELL: "bold red",
}


def _fmt(value: float | None, digits: int = 3) -> str:
    return "[dim]n/a[/dim]" if value is None else f"{value:+.{digits}f}"


def _signal(result: CompositeResult) -> str:
    return f"[{_SIGNAL_STYLES[result.signal]}]{result.label}[/]"


# ------------------------------------------------------------------
# Panels
# ------------------------------------------------------------------


def error_panel(msg: str) -> None:
    """Print a red error panel."""
    console.print(Panel(msg, title="Error", border_style="red"))


def success_panel(msg: str) -> None:
    """Print a green success panel."""
    console.print(Panel(msg, title="Success", border_style="green"))


def warning_panel(msg: str) -> None:
    """Print a yellow warning panel."""
    console.print(Panel(msg, title="Warning", border_style="yellow"))


def result_panel(result: CompositeResult) -> None:
    """Headline panel plus sub-score table for one result."""
    body = (
        f"Signal: {_signal(result)}\n"
        f"Composite score: {result.composite_score:+.4f}\n"
        f"Confidence: {result.confidence:.0%}\n"
        f"Weights: {result.weights_version}\n"
        f"Flags: {', '.join(sorted(result.flags)) or '-'}"
    )
    title = f"{result.symbol} · {result.domain.value}"
    console.print(Panel(body, title=title, border_style="blue"))

    table = Table(title="Sub-scores", show_header=True, header_style="bold cyan")
    table.add_column("Component", style="bold")
    table.add_column("Score", justify="right")
    for name, value in result.sub_scores.items():
        table.add_row(name, _fmt(value))
    console.print(table)


# ------------------------------------------------------------------
# Tables
# ------------------------------------------------------------------


def summary_table(summary: BatchSummary, title: str = "Batch Summary") -> None:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total", str(summary.total))
    table.add_row("Succeeded", f"[green]{summary.succeeded}[/green]")
    table.add_row("Failed", f"[red]{summary.failed}[/red]")
    table.add_row("Skipped", f"[yellow]{summary.skipped}[/yellow]")
    table.add_row("Total retries", str(summary.total_retries))
    table.add_row("Average retries", f"{summary.average_retries:.2f}")
    table.add_row("Peak concurrency", str(summary.peak_concurrency))
    table.add_row("Elapsed", f"{summary.elapsed_seconds:.1f}s")
    if summary.cancelled:
        table.add_row("Cancelled", "[bold red]yes[/bold red]")
    console.print(table)


def failures_table(summary: BatchSummary | ScreeningReport) -> None:
    if not summary.failures:
        return
    table = Table(title="Failures", show_header=True, header_style="bold red")
    table.add_column("Symbol", style="bold")
    table.add_column("Attempts", justify="right")
    table.add_column("Last error")
    for failure in summary.failures:
        table.add_row(failure.symbol, str(failure.attempts), failure.error)
    console.print(table)


def ranking_table(results: Sequence[CompositeResult], title: str = "Top Results") -> None:
    """Ranked results, best composite score first."""
    if not results:
        console.print(f"[dim]No data to display for '{title}'.[/dim]")
        return
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Symbol", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Signal")
    table.add_column("Confidence", justify="right")
    for rank, result in enumerate(results, start=1):
        table.add_row(
            str(rank),
            result.symbol,
            _fmt(result.composite_score),
            _signal(result),
            f"{result.confidence:.0%}",
        )
    console.print(table)


def screening_summary_table(report: ScreeningReport) -> None:
    table = Table(title="Safety Screen", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total", str(report.total))
    table.add_row("Safe to trade", f"[green]{len(report.safe_symbols)}[/green]")
    table.add_row("Assessed", str(len(report.assessments)))
    table.add_row("Failed", f"[red]{len(report.failures)}[/red]")
    for level in RiskLevel:
        count = report.risk_counts.get(level.value, 0)
        table.add_row(f"Risk {level.value}", f"[{_RISK_STYLES[level]}]{count}[/]")
    table.add_row("Elapsed", f"{report.elapsed_seconds:.1f}s")
    console.print(table)


def safety_table(assessments: Sequence[SafetyAssessment], title: str) -> None:
    if not assessments:
        console.print(f"[dim]No data to display for '{title}'.[/dim]")
        return
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Symbol", style="bold")
    table.add_column("Company")
    table.add_column("Score", justify="right")
    table.add_column("Risk")
    table.add_column("Volatility")
    table.add_column("Liquidity")
    table.add_column("Failed checks")
    for a in assessments:
        table.add_row(
            a.symbol,
            a.profile.name or "-",
            f"{a.safety_score:.2f}",
            f"[{_RISK_STYLES[a.risk_level]}]{a.risk_level.value}[/]",
            a.volatility_rating.value,
            a.liquidity_rating.value,
            ", ".join(c.value for c in a.failed_checks) or "-",
        )
    console.print(table)


def weights_table(vectors: Sequence[WeightVector]) -> None:
    for vector in vectors:
        table = Table(
            title=f"{vector.domain.value} ({vector.version})",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Component", style="bold")
        table.add_column("Weight", justify="right")
        for name, weight in vector.weights.items():
            table.add_row(name, f"{weight:.1%}")
        console.print(table)


# ------------------------------------------------------------------
# Progress
# ------------------------------------------------------------------


def batch_progress() -> Progress:
    """Progress bar for a batch run (symbols completed out of total)."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )
