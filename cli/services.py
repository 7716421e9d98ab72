"""Wire collaborators from settings for CLI commands."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from tradescore.analysis import DomainAnalyzer, build_analyzer
from tradescore.config import Settings
from tradescore.providers import (
    FmpClient,
    FmpFactProvider,
    FmpPriceProvider,
    InMemoryResultStore,
    RestResultStore,
    ResultStore,
)
from tradescore.scoring import ScoringDomain


@dataclass
class Services:
    """Open collaborators shared by every symbol of one command."""

    settings: Settings
    fmp: FmpClient
    store: ResultStore

    def analyzer(self, domain: ScoringDomain) -> DomainAnalyzer:
        facts = FmpFactProvider(
            self.fmp, include_market=domain is ScoringDomain.REGIME
        )
        lookback = (
            self.settings.lookback_days if domain is ScoringDomain.TIMING else None
        )
        return build_analyzer(
            domain, FmpPriceProvider(self.fmp), facts, lookback_days=lookback
        )


@asynccontextmanager
async def open_services(
    settings: Settings, *, remote_store: bool
) -> AsyncIterator[Services]:
    """Yield :class:`Services`, closing HTTP clients on exit.

    Without *remote_store* results are kept in memory only.
    """
    store: ResultStore = (
        RestResultStore.from_settings(settings) if remote_store else InMemoryResultStore()
    )
    fmp = FmpClient.from_settings(settings)
    try:
        yield Services(settings=settings, fmp=fmp, store=store)
    finally:
        await fmp.aclose()
        if isinstance(store, RestResultStore):
            await store.aclose()


def read_symbols(symbols: list[str] | None, path: str | None) -> list[str]:
    """Symbols from arguments and an optional file (one per line, ``#`` comments)."""
    collected = [s.strip().upper() for s in symbols or [] if s.strip()]
    if path:
        with open(path, encoding="utf-8") as handle:
            for line in handle:
                entry = line.split("#", 1)[0].strip()
                if entry:
                    collected.append(entry.upper())
    return list(dict.fromkeys(collected))
