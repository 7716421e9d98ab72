"""Tests for bars, facts, DataFrame conversion and error classification."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import numpy as np
import pandas as pd
import pytest

from tradescore.data import (
    FactName,
    bars_from_frame,
    bars_to_frame,
    closes,
    fact,
    validate_bars,
    volumes,
)
from tradescore.exceptions import (
    DataError,
    DataUnavailableError,
    MissingCredentialError,
    NotFoundError,
    RateLimitedError,
    is_retryable,
)


class TestValidateBars:
    def test_valid(self, random_walk_bars) -> None:
        validate_bars(random_walk_bars)

    def test_high_below_low(self, short_bars) -> None:
        bad = [*short_bars[:-1], replace(short_bars[-1], high=1.0, low=2.0)]
        with pytest.raises(DataError, match="below low"):
            validate_bars(bad)

    def test_negative_volume(self, short_bars) -> None:
        bad = [replace(short_bars[0], volume=-1), *short_bars[1:]]
        with pytest.raises(DataError, match="negative volume"):
            validate_bars(bad)

    def test_duplicate_timestamp(self, short_bars) -> None:
        bad = [*short_bars, replace(short_bars[-1], timestamp=short_bars[-1].timestamp)]
        with pytest.raises(DataError, match="ascending"):
            validate_bars(bad)

    def test_arrays(self, short_bars) -> None:
        assert closes(short_bars).tolist() == [103.0, 105.0, 106.0, 108.0, 109.0]
        assert volumes(short_bars).dtype == np.float64


class TestFacts:
    def test_lookup_by_enum_or_name(self) -> None:
        facts = {"roe": 0.2}
        assert fact(facts, FactName.ROE) == 0.2
        assert fact(facts, "roe") == 0.2

    def test_absent_values(self) -> None:
        facts = {"roe": None, "roa": float("inf"), "pe_ratio": float("nan")}
        assert fact(facts, FactName.ROE) is None
        assert fact(facts, FactName.ROA) is None
        assert fact(facts, FactName.PE_RATIO) is None
        assert fact(facts, FactName.VIX) is None


class TestFrames:
    def test_round_trip(self, short_bars) -> None:
        frame = bars_to_frame(short_bars)
        assert list(frame.columns) == ["open", "high", "low", "close", "volume"]
        assert bars_from_frame(frame) == short_bars

    def test_date_column_and_case(self) -> None:
        frame = pd.DataFrame(
            {
                "Date": ["2024-01-03", "2024-01-02"],
                "Open": [2.0, 1.0],
                "High": [2.5, 1.5],
                "Low": [1.5, 0.5],
                "Close": [2.2, np.nan],
                "Volume": [10, 20],
            }
        )
        bars = bars_from_frame(frame)
        assert len(bars) == 1
        assert bars[0].close == 2.2
        assert bars[0].volume == 10

    def test_sorted_oldest_first(self, short_bars) -> None:
        frame = bars_to_frame(short_bars).iloc[::-1]
        bars = bars_from_frame(frame)
        assert bars[0].timestamp < bars[-1].timestamp
        assert bars[-1].timestamp - bars[0].timestamp == timedelta(days=4)

    def test_missing_columns(self) -> None:
        with pytest.raises(DataError, match="missing OHLCV"):
            bars_from_frame(pd.DataFrame({"close": [1.0]}))


class TestRetryable:
    def test_classification(self) -> None:
        assert is_retryable(DataUnavailableError("fmp", "down"))
        assert is_retryable(RateLimitedError("fmp"))
        assert is_retryable(ValueError("unexpected"))
        assert not is_retryable(NotFoundError("fmp", "gone"))
        assert not is_retryable(MissingCredentialError("fmp", "FMP_API_KEY"))
        assert not is_retryable(DataError("bars not ascending"))

    def test_message_carries_source(self) -> None:
        error = MissingCredentialError("fmp", "FMP_API_KEY")
        assert str(error) == "[fmp] missing credential FMP_API_KEY"
        assert error.setting == "FMP_API_KEY"
