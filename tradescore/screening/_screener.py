"""Concurrent safety screen over a symbol universe."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pandas as pd

from tradescore.batch import FailureRecord, RetryPolicy, retry_async
from tradescore.exceptions import ConfigurationError
from tradescore.providers import CompanyDataProvider
from tradescore.screening._safety import SafetyAssessment, SafetyConfig, assess_safety
from tradescore.scoring import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScreeningReport:
    """Assessments and failures of one screening run."""

    assessments: tuple[SafetyAssessment, ...]
    failures: tuple[FailureRecord, ...] = ()
    elapsed_seconds: float = 0.0
    screened_at: datetime = field(default_factory=utc_now)

    @property
    def total(self) -> int:
        return len(self.assessments) + len(self.failures)

    @property
    def safe(self) -> list[SafetyAssessment]:
        """Safe-to-trade assessments, highest score first."""
        chosen = [a for a in self.assessments if a.is_safe_to_trade]
        return sorted(chosen, key=lambda a: (-a.safety_score, a.symbol))

    @property
    def safe_symbols(self) -> list[str]:
        return [a.symbol for a in self.safe]

    @property
    def risk_counts(self) -> dict[str, int]:
        return dict(Counter(a.risk_level.value for a in self.assessments))

    def to_frame(self) -> pd.DataFrame:
        rows = [a.to_record() for a in self.assessments]
        frame = pd.DataFrame(rows)
        if frame.empty:
            return frame
        return frame.sort_values(
            ["is_safe_to_trade", "safety_score", "symbol"],
            ascending=[False, False, True],
        ).reset_index(drop=True)

    def write_symbols(self, path: str | Path) -> int:
        """Write the safe symbols one per line; returns how many were written.

        The file starts with a ``#`` comment line and is accepted by
        ``batch run --symbols-file``.
        """
        symbols = self.safe_symbols
        lines = [f"# {len(symbols)} of {self.total} symbols safe to trade"]
        lines += symbols
        Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")
        return len(symbols)


class SafetyScreener:
    """Fetch company data and run :func:`assess_safety` for many symbols.

    At most ``max_concurrent`` symbols are fetched at once.  A symbol whose
    data cannot be fetched after ``retry`` is exhausted is reported as a
    failure and never stops the run.
    """

    def __init__(
        self,
        source: CompanyDataProvider,
        config: SafetyConfig | None = None,
        *,
        max_concurrent: int = 5,
        retry: RetryPolicy | None = None,
        on_assessed: Callable[[str], None] | None = None,
    ) -> None:
        if max_concurrent < 1:
            raise ConfigurationError(
                f"max_concurrent must be at least 1, got {max_concurrent}"
            )
        self._source = source
        self.config = config or SafetyConfig()
        self.max_concurrent = max_concurrent
        self.retry = retry or RetryPolicy.linear(2, 1.0)
        self._on_assessed = on_assessed

    async def screen(self, symbols: Iterable[str]) -> ScreeningReport:
        tickers = list(dict.fromkeys(symbols))
        semaphore = asyncio.Semaphore(self.max_concurrent)
        started = time.perf_counter()
        logger.info(
            "Screening %d symbols with %d workers", len(tickers), self.max_concurrent
        )

        outcomes = await asyncio.gather(
            *(self._screen_one(symbol, semaphore) for symbol in tickers)
        )
        assessments = tuple(o for o in outcomes if isinstance(o, SafetyAssessment))
        failures = tuple(o for o in outcomes if isinstance(o, FailureRecord))
        report = ScreeningReport(
            assessments, failures, time.perf_counter() - started
        )
        logger.info(
            "Screen finished in %.1fs: %d safe, %d assessed, %d failed",
            report.elapsed_seconds, len(report.safe_symbols),
            len(assessments), len(failures),
        )
        return report

    async def _screen_one(
        self, symbol: str, semaphore: asyncio.Semaphore
    ) -> SafetyAssessment | FailureRecord:
        attempts = 0

        async def fetch():
            nonlocal attempts
            attempts += 1
            return await self._source.fetch(symbol)

        async with semaphore:
            try:
                profile, ratios, bars = await retry_async(fetch, self.retry)
                outcome: SafetyAssessment | FailureRecord = assess_safety(
                    profile, ratios, bars, self.config
                )
                logger.debug(
                    "%s: score %.2f, risk %s", symbol,
                    outcome.safety_score, outcome.risk_level.value,
                )
            except Exception as exc:
                message = str(exc)
                error = f"{type(exc).__name__}: {message}" if message else type(exc).__name__
                logger.warning("Screening %s failed: %s", symbol, error)
                outcome = FailureRecord(symbol, error, attempts)

        if self._on_assessed is not None:
            try:
                self._on_assessed(symbol)
            except Exception:
                logger.exception("on_assessed callback failed for %s", symbol)
        return outcome
