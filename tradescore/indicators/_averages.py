"""Moving averages, MACD and Bollinger Bands."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def sma(prices: Sequence[float] | np.ndarray, period: int) -> float:
    """Simple average of the last *period* prices (all of them if fewer)."""
    values = np.asarray(prices, dtype=np.float64)
    if values.size == 0:
        return 0.0
    return float(values[-period:].mean())


def ema(prices: Sequence[float] | np.ndarray, period: int) -> float:
    """Exponential moving average seeded with the SMA of the first *period* prices.

    Returns 0.0 for an empty series and the plain mean when fewer than
    *period* prices are available.
    """
    values = np.asarray(prices, dtype=np.float64)
    if values.size == 0:
        return 0.0
    if values.size < period:
        return float(values.mean())

    k = 2.0 / (period + 1)
    value = float(values[:period].mean())
    for price in values[period:]:
        value = float(price) * k + value * (1.0 - k)
    return value


def macd(
    prices: Sequence[float] | np.ndarray,
    fast: int = 12,
    slow: int = 26,
) -> tuple[float, float, float]:
    """MACD line, signal and histogram.

    The signal line is approximated as ``0.9 * macd`` rather than a
    9-period EMA of the MACD line, so the histogram is always
    ``0.1 * macd``.  Fewer than *slow* prices gives ``(0, 0, 0)``.
    """
    values = np.asarray(prices, dtype=np.float64)
    if values.size < slow:
        return 0.0, 0.0, 0.0
    line = ema(values, fast) - ema(values, slow)
    signal = line * 0.9
    return line, signal, line - signal


def bollinger_bands(
    prices: Sequence[float] | np.ndarray,
    period: int = 20,
    k: float = 2.0,
) -> tuple[float, float, float]:
    """Upper, middle and lower band from the last *period* prices.

    Uses the population standard deviation.  With fewer than *period*
    prices all three bands collapse onto the latest price.
    """
    values = np.asarray(prices, dtype=np.float64)
    if values.size < period:
        price = float(values[-1]) if values.size else 0.0
        return price, price, price
    window = values[-period:]
    middle = float(window.mean())
    std = float(window.std())
    return middle + k * std, middle, middle - k * std
