"""tradescore CLI: Typer app factory and entry point."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from cli.analyze import analyze_app
from cli.batch import batch_app
from cli.screen import screen_app
from cli.display import weights_table
from tradescore import __version__
from tradescore.config import Settings
from tradescore.scoring import ALL_WEIGHT_VECTORS

app = typer.Typer(
    name="tradescore",
    help="Composite signal scoring from the terminal.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tradescore {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    env_file: Optional[str] = typer.Option(
        None, "--env-file", help="Read settings from this .env file."
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override TRADESCORE_LOG_LEVEL."
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show CLI version and exit.",
    ),
) -> None:
    """Global options applied before any sub-command."""
    settings = Settings(_env_file=env_file) if env_file else Settings()
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = settings


@app.command()
def weights() -> None:
    """Show every domain's weight vector and version."""
    weights_table(ALL_WEIGHT_VECTORS)


# Register command groups
app.add_typer(analyze_app)
app.add_typer(batch_app)
app.add_typer(screen_app)


if __name__ == "__main__":
    app()
