"""Tests for SMA, EMA, MACD and Bollinger Bands."""

from __future__ import annotations

import numpy as np
import pytest

from tradescore.indicators import bollinger_bands, ema, macd, sma


class TestSMA:
    def test_last_window(self) -> None:
        assert sma([1, 2, 3, 4, 5], 3) == pytest.approx(4.0)

    def test_short_series_uses_all_prices(self) -> None:
        assert sma([2, 4], 5) == pytest.approx(3.0)

    def test_empty(self) -> None:
        assert sma([], 5) == 0.0


class TestEMA:
    def test_empty(self) -> None:
        assert ema([], 12) == 0.0

    def test_short_series_is_mean(self) -> None:
        assert ema([1, 2, 3], 12) == pytest.approx(2.0)

    def test_exact_period_is_sma_seed(self) -> None:
        assert ema([1, 2, 3, 4], 4) == pytest.approx(2.5)

    def test_recursion(self) -> None:
        k = 2 / 5
        expected = 5 * k + 2.5 * (1 - k)
        assert ema([1, 2, 3, 4, 5], 4) == pytest.approx(expected)

    def test_constant_series(self) -> None:
        assert ema([7.0] * 40, 12) == pytest.approx(7.0)


class TestMACD:
    def test_short_series_is_zero(self) -> None:
        assert macd(list(range(20))) == (0.0, 0.0, 0.0)

    def test_signal_and_histogram_relation(self) -> None:
        prices = [100 * 1.01**i for i in range(60)]
        line, signal, histogram = macd(prices)
        assert line > 0
        assert signal == pytest.approx(0.9 * line)
        assert histogram == pytest.approx(0.1 * line)

    def test_downtrend_is_negative(self) -> None:
        line, _, _ = macd([100 * 0.99**i for i in range(60)])
        assert line < 0


class TestBollinger:
    def test_collapses_on_short_history(self) -> None:
        assert bollinger_bands([1.0, 2.0, 3.0]) == (3.0, 3.0, 3.0)

    def test_population_std(self) -> None:
        prices = np.arange(1.0, 21.0)
        upper, middle, lower = bollinger_bands(prices)
        std = float(np.std(prices))
        assert middle == pytest.approx(10.5)
        assert upper == pytest.approx(10.5 + 2 * std)
        assert lower == pytest.approx(10.5 - 2 * std)

    def test_ordering(self, random_walk_bars) -> None:
        upper, middle, lower = bollinger_bands([b.close for b in random_walk_bars])
        assert lower <= middle <= upper
