"""Bounded momentum oscillators: RSI, Stochastic and Williams %R."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from tradescore.data import Bar


def rsi(prices: Sequence[float] | np.ndarray, period: int = 14) -> float:
    """Relative Strength Index with Wilder smoothing.

    Values range from 0 to 100; above 70 is conventionally overbought and
    below 30 oversold.  Fewer than ``period + 1`` prices returns the
    neutral 50.0, and a window without losses returns 100.0.
    """
    values = np.asarray(prices, dtype=np.float64)
    if values.size < period + 1:
        return 50.0

    deltas = np.diff(values)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = float(gains[:period].mean())
    avg_loss = float(losses[:period].mean())
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + float(gain)) / period
        avg_loss = (avg_loss * (period - 1) + float(loss)) / period

    if avg_loss == 0.0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def _window_range(bars: Sequence[Bar], period: int) -> tuple[float, float, float]:
    window = bars[-period:]
    highest = max(b.high for b in window)
    lowest = min(b.low for b in window)
    return highest, lowest, bars[-1].close


def stochastic(bars: Sequence[Bar], period: int = 14) -> tuple[float, float]:
    """Stochastic %K and %D.

    %D is approximated as ``0.8 * %K`` instead of a 3-period SMA of %K.
    A flat window gives %K = 50; fewer than *period* bars gives (50, 50).
    """
    if len(bars) < period:
        return 50.0, 50.0
    highest, lowest, close = _window_range(bars, period)
    if highest == lowest:
        k = 50.0
    else:
        k = 100.0 * (close - lowest) / (highest - lowest)
    return k, k * 0.8


def williams_r(bars: Sequence[Bar], period: int = 14) -> float:
    """Williams %R in [-100, 0]; -50 for short history or a flat window."""
    if len(bars) < period:
        return -50.0
    highest, lowest, close = _window_range(bars, period)
    if highest == lowest:
        return -50.0
    return -100.0 * (highest - close) / (highest - lowest)
