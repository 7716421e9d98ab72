"""True range, ATR and volume ratio."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from tradescore.data import Bar


def true_ranges(bars: Sequence[Bar]) -> np.ndarray:
    """Per-bar true range from the second bar onward."""
    if len(bars) < 2:
        return np.empty(0, dtype=np.float64)
    high = np.array([b.high for b in bars[1:]], dtype=np.float64)
    low = np.array([b.low for b in bars[1:]], dtype=np.float64)
    prev_close = np.array([b.close for b in bars[:-1]], dtype=np.float64)
    return np.maximum.reduce(
        [high - low, np.abs(high - prev_close), np.abs(low - prev_close)]
    )


def atr(bars: Sequence[Bar], period: int = 14) -> float:
    """Average True Range over the last *period* true ranges.

    Averages every available true range when there are fewer than
    *period*, and returns 0.0 for fewer than two bars.
    """
    ranges = true_ranges(bars)
    if ranges.size == 0:
        return 0.0
    return float(ranges[-period:].mean())


def volume_ratio(
    bars: Sequence[Bar], recent: int = 5, prior: int = 15
) -> float | None:
    """Average volume of the last *recent* bars over the *prior* bars before them.

    ``None`` when history is shorter than ``recent + prior`` or the prior
    window traded nothing.
    """
    if len(bars) < recent + prior:
        return None
    volume = np.array([b.volume for b in bars], dtype=np.float64)
    recent_avg = volume[-recent:].mean()
    prior_avg = volume[-(recent + prior):-recent].mean()
    if prior_avg == 0:
        return None
    return float(recent_avg / prior_avg)
