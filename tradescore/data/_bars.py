"""OHLCV bar value object and price-series helpers."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

import numpy as np

from tradescore.exceptions import DataError


@dataclass(frozen=True)
class Bar:
    """One OHLCV observation.

    Parameters
    ----------
    timestamp : datetime
        Bar close time.
    open, high, low, close : float
        Prices for the period.
    volume : int
        Traded volume, non-negative.
    """

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: int


PriceSeries = Sequence[Bar]


def validate_bars(bars: PriceSeries) -> None:
    """Raise :class:`DataError` if *bars* is not a well-formed price series."""
    previous: datetime | None = None
    for i, bar in enumerate(bars):
        if bar.high < bar.low:
            raise DataError(
                f"bar {i} ({bar.timestamp}) has high {bar.high} below low {bar.low}"
            )
        if bar.volume < 0:
            raise DataError(f"bar {i} ({bar.timestamp}) has negative volume")
        if previous is not None and bar.timestamp <= previous:
            raise DataError(
                f"bars must be strictly ascending, got {bar.timestamp} after {previous}"
            )
        previous = bar.timestamp


def closes(bars: PriceSeries) -> np.ndarray:
    """Closing prices as a float array, oldest first."""
    return np.array([b.close for b in bars], dtype=np.float64)


def highs(bars: PriceSeries) -> np.ndarray:
    return np.array([b.high for b in bars], dtype=np.float64)


def lows(bars: PriceSeries) -> np.ndarray:
    return np.array([b.low for b in bars], dtype=np.float64)


def volumes(bars: PriceSeries) -> np.ndarray:
    return np.array([b.volume for b in bars], dtype=np.float64)
