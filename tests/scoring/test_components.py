"""Tests for the individual sub-score rules."""

from __future__ import annotations

import math

import pytest

from tradescore.scoring import (
    clamp,
    linear_score,
    mean_present,
    ratio_change,
    score_atr,
    score_bollinger,
    score_macd,
    score_moving_averages,
    score_rsi,
    score_stochastic,
    score_volume,
    score_williams_r,
)


class TestHelpers:
    def test_clamp(self) -> None:
        assert clamp(2.0) == 1.0
        assert clamp(-3.0) == -1.0
        assert clamp(0.3) == 0.3
        assert clamp(math.nan) == 0.0

    def test_mean_present(self) -> None:
        assert mean_present([1.0, None, 0.0]) == pytest.approx(0.5)
        assert mean_present([None, None]) is None

    def test_linear_score(self) -> None:
        assert linear_score(0.25, 0.10, 0.15) == pytest.approx(1.0)
        assert linear_score(15.0, 20.0, 10.0, higher_is_better=False) == pytest.approx(0.5)
        assert linear_score(None, 0.0, 1.0) is None

    def test_ratio_change(self) -> None:
        assert ratio_change(2.2, 2.0) == pytest.approx(0.1)
        assert ratio_change(-1.0, -2.0) == pytest.approx(0.5)
        assert ratio_change(1.0, 0.0) is None


class TestOscillators:
    @pytest.mark.parametrize("value", [30.0, 50.0, 70.0])
    def test_rsi_neutral_band(self, value: float) -> None:
        assert score_rsi(value) == 0.0

    def test_rsi_overbought_is_bearish(self) -> None:
        assert score_rsi(85.0) == pytest.approx(-0.5)
        assert score_rsi(100.0) == pytest.approx(-1.0)

    def test_rsi_oversold_is_bullish(self) -> None:
        assert score_rsi(15.0) == pytest.approx(0.5)

    def test_rsi_missing(self) -> None:
        assert score_rsi(None) is None

    def test_stochastic_uses_average(self) -> None:
        assert score_stochastic(100.0, 80.0) == pytest.approx(-0.5)
        assert score_stochastic(10.0, 8.0) == pytest.approx(0.55)
        assert score_stochastic(50.0, None) is None

    def test_williams_bands(self) -> None:
        assert score_williams_r(-10.0) == pytest.approx(-0.5)
        assert score_williams_r(-90.0) == pytest.approx(0.5)
        assert score_williams_r(-50.0) == 0.0


class TestTrendRules:
    def test_macd(self) -> None:
        assert score_macd(2.0, 1.9) == pytest.approx(0.1)
        assert score_macd(-30.0, -27.0) == -1.0
        assert score_macd(None, 1.0) is None

    def test_bollinger_near_upper_band(self) -> None:
        assert score_bollinger(112.0, 110.0, 100.0, 90.0) == -1.0

    def test_bollinger_near_lower_band(self) -> None:
        assert score_bollinger(88.0, 110.0, 100.0, 90.0) == 1.0

    def test_bollinger_inside(self) -> None:
        assert score_bollinger(105.0, 110.0, 100.0, 90.0) == pytest.approx(-0.5)

    def test_bollinger_zero_width(self) -> None:
        assert score_bollinger(100.0, 100.0, 100.0, 100.0) == 0.0

    def test_moving_averages_all_above(self) -> None:
        assert score_moving_averages(110.0, [(100.0, 0.5), (95.0, 0.3), (90.0, 0.2)]) == 1.0

    def test_moving_averages_mixed(self) -> None:
        score = score_moving_averages(100.0, [(95.0, 0.5), (105.0, 0.3), (110.0, 0.2)])
        assert score == pytest.approx(0.0)

    def test_moving_averages_renormalizes(self) -> None:
        score = score_moving_averages(100.0, [(95.0, 0.5), (105.0, 0.3), (None, 0.2)])
        assert score == pytest.approx(0.2 / 0.8)

    def test_moving_averages_none_present(self) -> None:
        assert score_moving_averages(100.0, [(None, 0.5)]) is None


class TestVolatilityRules:
    def test_atr_spike_is_bearish(self) -> None:
        assert score_atr(3.0, 1.0) == -1.0

    def test_atr_calm(self) -> None:
        assert score_atr(0.4, 1.0) == 0.5

    def test_atr_linear(self) -> None:
        assert score_atr(1.5, 1.0) == pytest.approx(-0.5)

    def test_atr_zero_baseline(self) -> None:
        assert score_atr(1.0, 0.0) == 0.0

    def test_volume_confirms_rally(self) -> None:
        assert score_volume(2.0, 0.01) == 1.0
        assert score_volume(0.5, 0.01) == -0.5

    def test_volume_confirms_decline(self) -> None:
        assert score_volume(2.0, -0.01) == -1.0
        assert score_volume(0.5, -0.01) == 0.5

    def test_volume_flat_price(self) -> None:
        assert score_volume(1.3, 0.0) == 0.2
        assert score_volume(1.0, 0.0) == 0.0

    def test_volume_missing(self) -> None:
        assert score_volume(None, 0.01) is None
