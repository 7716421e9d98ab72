"""Per-domain analyzers: gather inputs from collaborators, then score.

Input failures are handled in one place:

- a missing credential degrades the affected inputs to "absent" and adds
  a ``missing_credential:<source>`` flag;
- an unexpected response shape is retried under ``fetch_retry`` and then
  degraded the same way with an ``invalid_response:<source>`` flag;
- every other error propagates, so the batch orchestrator can retry or
  record the symbol as failed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tradescore.batch import RetryPolicy, retry_async
from tradescore.data import Bar, FactSet, validate_bars
from tradescore.exceptions import InvalidResponseFormatError, MissingCredentialError
from tradescore.indicators import IndicatorConfig
from tradescore.providers import FactProvider, PriceSeriesProvider
from tradescore.scoring import (
    CompositeResult,
    ScoringDomain,
    score_fundamentals,
    score_regime,
    score_sentiment,
    score_timing,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_FETCH_RETRY = RetryPolicy.fixed(max_retries=2, delay=1.0)


async def fetch_optional(
    fetch: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    flags: set[str],
) -> T | None:
    """Run *fetch*, turning credential and format problems into ``None``."""
    try:
        return await retry_async(
            fetch,
            policy,
            should_retry=lambda exc: isinstance(exc, InvalidResponseFormatError),
        )
    except MissingCredentialError as exc:
        logger.warning("%s; continuing without it", exc)
        flags.add(f"missing_credential:{exc.source}")
    except InvalidResponseFormatError as exc:
        logger.warning("%s; treating as missing data", exc)
        flags.add(f"invalid_response:{exc.source}")
    return None


async def _fetch_bars(
    prices: PriceSeriesProvider,
    symbol: str,
    lookback_days: int,
    policy: RetryPolicy,
    flags: set[str],
) -> list[Bar] | None:
    bars = await fetch_optional(
        lambda: prices.fetch(symbol, lookback_days), policy, flags
    )
    if bars is not None:
        validate_bars(bars)
    return bars


async def _fetch_facts(
    facts: FactProvider, symbol: str, policy: RetryPolicy, flags: set[str]
) -> FactSet:
    values = await fetch_optional(lambda: facts.fetch(symbol), policy, flags)
    return values if values is not None else {}


class TimingAnalyzer:
    """Technical timing analysis from daily bars."""

    domain = ScoringDomain.TIMING

    def __init__(
        self,
        prices: PriceSeriesProvider,
        *,
        lookback_days: int = 200,
        indicator_config: IndicatorConfig | None = None,
        fetch_retry: RetryPolicy = DEFAULT_FETCH_RETRY,
    ) -> None:
        self._prices = prices
        self._lookback_days = lookback_days
        self._indicator_config = indicator_config
        self._fetch_retry = fetch_retry

    async def __call__(self, symbol: str) -> CompositeResult:
        flags: set[str] = set()
        bars = await _fetch_bars(
            self._prices, symbol, self._lookback_days, self._fetch_retry, flags
        )
        return score_timing(
            symbol,
            bars or [],
            config=self._indicator_config,
            extra_flags=flags,
        )


class SentimentAnalyzer:
    """Sentiment from earnings revisions, price strength and positioning facts."""

    domain = ScoringDomain.SENTIMENT

    def __init__(
        self,
        prices: PriceSeriesProvider,
        facts: FactProvider,
        *,
        lookback_days: int = 60,
        fetch_retry: RetryPolicy = DEFAULT_FETCH_RETRY,
    ) -> None:
        self._prices = prices
        self._facts = facts
        self._lookback_days = lookback_days
        self._fetch_retry = fetch_retry

    async def __call__(self, symbol: str) -> CompositeResult:
        flags: set[str] = set()
        bars, facts = await asyncio.gather(
            _fetch_bars(self._prices, symbol, self._lookback_days, self._fetch_retry, flags),
            _fetch_facts(self._facts, symbol, self._fetch_retry, flags),
        )
        return score_sentiment(symbol, bars, facts, extra_flags=flags)


class FundamentalsAnalyzer:
    """Fundamentals from financial ratios."""

    domain = ScoringDomain.FUNDAMENTALS

    def __init__(
        self,
        facts: FactProvider,
        *,
        fetch_retry: RetryPolicy = DEFAULT_FETCH_RETRY,
    ) -> None:
        self._facts = facts
        self._fetch_retry = fetch_retry

    async def __call__(self, symbol: str) -> CompositeResult:
        flags: set[str] = set()
        facts = await _fetch_facts(self._facts, symbol, self._fetch_retry, flags)
        return score_fundamentals(symbol, facts, extra_flags=flags)


class RegimeAnalyzer:
    """Market regime of a benchmark (e.g. ``SPY``) plus market-wide facts."""

    domain = ScoringDomain.REGIME

    def __init__(
        self,
        prices: PriceSeriesProvider,
        facts: FactProvider,
        *,
        lookback_days: int = 120,
        fetch_retry: RetryPolicy = DEFAULT_FETCH_RETRY,
    ) -> None:
        self._prices = prices
        self._facts = facts
        self._lookback_days = lookback_days
        self._fetch_retry = fetch_retry

    async def __call__(self, benchmark: str) -> CompositeResult:
        flags: set[str] = set()
        bars, facts = await asyncio.gather(
            _fetch_bars(self._prices, benchmark, self._lookback_days, self._fetch_retry, flags),
            _fetch_facts(self._facts, benchmark, self._fetch_retry, flags),
        )
        return score_regime(benchmark, bars, facts, extra_flags=flags)


DomainAnalyzer = TimingAnalyzer | SentimentAnalyzer | FundamentalsAnalyzer | RegimeAnalyzer


def build_analyzer(
    domain: ScoringDomain,
    prices: PriceSeriesProvider,
    facts: FactProvider,
    *,
    lookback_days: int | None = None,
    fetch_retry: RetryPolicy = DEFAULT_FETCH_RETRY,
) -> DomainAnalyzer:
    """Analyzer for *domain* wired to the given collaborators."""
    domain = ScoringDomain(domain)
    if domain is ScoringDomain.TIMING:
        return TimingAnalyzer(
            prices, lookback_days=lookback_days or 200, fetch_retry=fetch_retry
        )
    if domain is ScoringDomain.SENTIMENT:
        return SentimentAnalyzer(
            prices, facts, lookback_days=lookback_days or 60, fetch_retry=fetch_retry
        )
    if domain is ScoringDomain.FUNDAMENTALS:
        return FundamentalsAnalyzer(facts, fetch_retry=fetch_retry)
    return RegimeAnalyzer(
        prices, facts, lookback_days=lookback_days or 120, fetch_retry=fetch_retry
    )
