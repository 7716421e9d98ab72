"""Tests for RSI, Stochastic and Williams %R."""

from __future__ import annotations

import numpy as np
import pytest

from tradescore.indicators import rsi, stochastic, williams_r


class TestRSI:
    def test_short_series_is_neutral(self) -> None:
        assert rsi([103, 105, 106, 108, 109]) == 50.0

    def test_exactly_period_prices_is_neutral(self) -> None:
        assert rsi(list(range(1, 15)), period=14) == 50.0

    def test_only_gains_is_100(self) -> None:
        assert rsi(list(range(1, 30))) == 100.0

    def test_only_losses_is_0(self) -> None:
        assert rsi(list(range(30, 1, -1))) == pytest.approx(0.0)

    def test_flat_series_has_no_losses(self) -> None:
        assert rsi([10.0] * 20) == 100.0

    def test_initial_window_matches_simple_ratio(self) -> None:
        # 3 gains of 1 and 1 loss of 1 over period 4: RS = 3, RSI = 75.
        assert rsi([10, 11, 12, 11, 12], period=4) == pytest.approx(75.0)

    def test_wilder_smoothing_step(self) -> None:
        prices = [10, 11, 12, 11, 12, 10]
        # After the seed window: avg_gain = (0.75*3 + 0)/4, avg_loss = (0.25*3 + 2)/4
        avg_gain = 0.75 * 3 / 4
        avg_loss = (0.25 * 3 + 2) / 4
        expected = 100 - 100 / (1 + avg_gain / avg_loss)
        assert rsi(prices, period=4) == pytest.approx(expected)

    def test_bounded(self, random_walk_bars) -> None:
        closes = np.array([b.close for b in random_walk_bars])
        value = rsi(closes)
        assert 0.0 <= value <= 100.0


class TestStochastic:
    def test_short_history_is_neutral(self, short_bars) -> None:
        assert stochastic(short_bars) == (50.0, 50.0)

    def test_close_at_high(self, uptrend_bars) -> None:
        k, d = stochastic(uptrend_bars)
        assert 90.0 < k <= 100.0
        assert d == pytest.approx(k * 0.8)

    def test_close_at_low(self, downtrend_bars) -> None:
        k, _ = stochastic(downtrend_bars)
        assert k < 10.0

    def test_flat_range(self, make_bars) -> None:
        bars = make_bars([50.0] * 20, spread=0.0)
        assert stochastic(bars) == (50.0, 40.0)


class TestWilliamsR:
    def test_short_history_is_neutral(self, short_bars) -> None:
        assert williams_r(short_bars) == -50.0

    def test_flat_range(self, make_bars) -> None:
        assert williams_r(make_bars([50.0] * 20, spread=0.0)) == -50.0

    def test_range(self, random_walk_bars) -> None:
        assert -100.0 <= williams_r(random_walk_bars) <= 0.0

    def test_near_high_is_close_to_zero(self, uptrend_bars) -> None:
        assert williams_r(uptrend_bars) > -10.0
