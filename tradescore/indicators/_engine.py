"""Compute the full indicator set for one price series."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

from tradescore.data import PriceSeries, closes
from tradescore.indicators._averages import bollinger_bands, ema, macd, sma
from tradescore.indicators._config import CORE_INDICATORS, IndicatorConfig
from tradescore.indicators._oscillators import rsi, stochastic, williams_r
from tradescore.indicators._volatility import atr, true_ranges, volume_ratio

logger = logging.getLogger(__name__)

IndicatorSet = Mapping[str, Optional[float]]

SMA_KEYS: tuple[str, str, str] = ("sma_short", "sma_medium", "sma_long")


def compute_indicators(
    bars: PriceSeries,
    config: IndicatorConfig | None = None,
) -> IndicatorSet:
    """Compute every indicator for *bars* (oldest first).

    An indicator is ``None`` when the series is shorter than its lookback
    requires; the underlying functions would otherwise return their
    neutral defaults and hide the gap.

    Parameters
    ----------
    bars : PriceSeries
        Ascending OHLCV bars.
    config : IndicatorConfig or None
        Lookback windows.  Defaults to ``IndicatorConfig()``.

    Returns
    -------
    IndicatorSet
        Read-only mapping from indicator name to value or ``None``.
    """
    if config is None:
        config = IndicatorConfig()

    prices = closes(bars)
    n = len(prices)
    values: dict[str, Optional[float]] = {}

    values["close"] = float(prices[-1]) if n else None
    if n >= 2 and prices[-2] != 0:
        values["price_change"] = float((prices[-1] - prices[-2]) / prices[-2])
    else:
        values["price_change"] = None

    values["rsi"] = rsi(prices, config.rsi_period) if n > config.rsi_period else None

    values["ema_fast"] = ema(prices, config.macd_fast) if n >= config.macd_fast else None
    if n >= config.macd_slow:
        line, signal, histogram = macd(prices, config.macd_fast, config.macd_slow)
        values["ema_slow"] = ema(prices, config.macd_slow)
        values["macd"] = line
        values["macd_signal"] = signal
        values["macd_histogram"] = histogram
    else:
        for key in ("ema_slow", "macd", "macd_signal", "macd_histogram"):
            values[key] = None

    if n >= config.bollinger_period:
        upper, middle, lower = bollinger_bands(
            prices, config.bollinger_period, config.bollinger_k
        )
    else:
        upper = middle = lower = None
    values["bollinger_upper"] = upper
    values["bollinger_middle"] = middle
    values["bollinger_lower"] = lower

    for key, period in zip(SMA_KEYS, config.sma_periods):
        values[key] = sma(prices, period) if n >= period else None

    if n >= config.stochastic_period:
        values["stochastic_k"], values["stochastic_d"] = stochastic(
            bars, config.stochastic_period
        )
    else:
        values["stochastic_k"] = values["stochastic_d"] = None

    values["williams_r"] = (
        williams_r(bars, config.williams_period)
        if n >= config.williams_period
        else None
    )

    if n >= 2:
        values["atr"] = atr(bars, config.atr_period)
        values["atr_baseline"] = float(
            true_ranges(bars)[-config.atr_baseline_window:].mean()
        )
    else:
        values["atr"] = values["atr_baseline"] = None

    values["volume_ratio"] = volume_ratio(
        bars, config.volume_recent, config.volume_prior
    )

    logger.debug(
        "Computed %d/%d indicators from %d bars",
        sum(v is not None for v in values.values()),
        len(values),
        n,
    )
    return MappingProxyType(values)


def count_core_indicators(indicators: IndicatorSet) -> int:
    """Number of core indicators present in *indicators*."""
    return sum(indicators.get(name) is not None for name in CORE_INDICATORS)
