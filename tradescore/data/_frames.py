"""Conversions between bar sequences and pandas DataFrames."""

from __future__ import annotations

import pandas as pd

from tradescore.data._bars import Bar, PriceSeries
from tradescore.exceptions import DataError

_OHLCV = ("open", "high", "low", "close", "volume")


def bars_from_frame(frame: pd.DataFrame) -> list[Bar]:
    """Build bars from an OHLCV DataFrame.

    Column names are matched case-insensitively.  Timestamps come from a
    ``date`` column when present, otherwise from the index.  Rows with a
    missing close are dropped and the result is sorted oldest first.
    """
    df = frame.rename(columns={c: str(c).lower() for c in frame.columns})
    missing = [c for c in _OHLCV if c not in df.columns]
    if missing:
        raise DataError(f"frame is missing OHLCV columns: {missing}")

    if "date" in df.columns:
        df = df.set_index("date")
    df = df.dropna(subset=["close"])
    df.index = pd.to_datetime(df.index)
    df = df.sort_index()

    return [
        Bar(
            timestamp=ts.to_pydatetime(),
            open=float(row["open"]),
            high=float(row["high"]),
            low=float(row["low"]),
            close=float(row["close"]),
            volume=int(row["volume"]) if pd.notna(row["volume"]) else 0,
        )
        for ts, row in df.iterrows()
    ]


def bars_to_frame(bars: PriceSeries) -> pd.DataFrame:
    """Inverse of :func:`bars_from_frame`, indexed by timestamp."""
    return pd.DataFrame(
        {col: [getattr(b, col) for b in bars] for col in _OHLCV},
        index=pd.DatetimeIndex([b.timestamp for b in bars], name="date"),
    )
