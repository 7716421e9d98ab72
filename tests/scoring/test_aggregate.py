"""Tests for weighted aggregation, classification and confidence."""

from __future__ import annotations

import pytest

from tradescore.scoring import (
    FULL_WINDOW_BARS,
    SENTIMENT_WEIGHTS,
    ScoringDomain,
    Signal,
    SignalThresholds,
    WeightVector,
    aggregate,
    classify,
    completeness_confidence,
    count_present,
    signal_label,
    timing_composite,
    timing_confidence,
    weighted_mean,
)

INDICATORS = (
    "rsi", "macd", "bollinger", "moving_averages",
    "stochastic", "williams_r", "atr", "volume",
)


class TestAggregate:
    def test_timing_example(self) -> None:
        composite = timing_composite({name: 0.4 for name in INDICATORS}, 0.0)
        assert pytest.approx(composite, abs=1e-9) == 0.28
        assert classify(composite, SignalThresholds.for_timing()) is Signal.BUY

    def test_sentiment_example(self) -> None:
        sub_scores = {
            "earnings_revisions": 0.5,
            "relative_strength": 0.3,
            "short_interest": -0.2,
            "options_flow": 0.1,
        }
        composite = aggregate(sub_scores, SENTIMENT_WEIGHTS)
        assert pytest.approx(composite, abs=1e-9) == 0.26
        signal = classify(composite, SignalThresholds.for_sentiment())
        assert signal_label(ScoringDomain.SENTIMENT, signal) == "WeakBuy"

    def test_missing_sub_scores_renormalize(self) -> None:
        weights = WeightVector(ScoringDomain.REGIME, "t", {"a": 0.5, "b": 0.3, "c": 0.2})
        composite = aggregate({"a": 1.0, "b": None, "c": 0.0}, weights)
        assert pytest.approx(composite, abs=1e-9) == 0.5 / 0.7

    def test_all_missing_is_zero(self) -> None:
        assert aggregate({"earnings_revisions": None}, SENTIMENT_WEIGHTS) == 0.0
        assert weighted_mean({}, SENTIMENT_WEIGHTS) is None

    def test_out_of_range_inputs_are_clamped(self) -> None:
        weights = WeightVector(ScoringDomain.REGIME, "t", {"a": 1.0})
        assert aggregate({"a": 5.0}, weights) == 1.0

    def test_unknown_names_ignored(self) -> None:
        weights = WeightVector(ScoringDomain.REGIME, "t", {"a": 1.0})
        assert aggregate({"a": 0.2, "z": -1.0}, weights) == pytest.approx(0.2)

    def test_timing_without_trend(self) -> None:
        composite = timing_composite({name: 0.4 for name in INDICATORS}, None)
        assert pytest.approx(composite, abs=1e-9) == 0.4

    def test_count_present(self) -> None:
        assert count_present({"earnings_revisions": 0.1, "options_flow": None}, SENTIMENT_WEIGHTS) == 1


class TestClassify:
    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (1.0, Signal.STRONG_BUY),
            (0.6, Signal.STRONG_BUY),
            (0.5999, Signal.BUY),
            (0.2, Signal.BUY),
            (0.0, Signal.HOLD),
            (-0.2, Signal.HOLD),
            (-0.2001, Signal.SELL),
            (-0.6, Signal.SELL),
            (-0.61, Signal.STRONG_SELL),
            (-1.0, Signal.STRONG_SELL),
        ],
    )
    def test_inclusive_lower_bounds(self, score: float, expected: Signal) -> None:
        assert classify(score) is expected

    def test_sentiment_strong_band(self) -> None:
        assert classify(0.5, SignalThresholds.for_sentiment()) is Signal.STRONG_BUY
        assert classify(0.5) is Signal.BUY

    def test_regime_labels(self) -> None:
        assert signal_label(ScoringDomain.REGIME, Signal.STRONG_SELL) == "RiskOff"


class TestConfidence:
    def test_completeness_steps(self) -> None:
        steps = [completeness_confidence(v, 4, 0.2) for v in range(5)]
        assert steps == pytest.approx([0.2, 0.4, 0.6, 0.8, 1.0])

    def test_completeness_without_floor(self) -> None:
        assert completeness_confidence(0, 5) == 0.0
        assert completeness_confidence(5, 5) == 1.0

    def test_completeness_clamps_counts(self) -> None:
        assert completeness_confidence(9, 4) == 1.0
        assert completeness_confidence(-1, 4, 0.2) == pytest.approx(0.2)

    def test_timing_full(self) -> None:
        assert timing_confidence(FULL_WINDOW_BARS, 7) == pytest.approx(1.0)

    def test_timing_floor(self) -> None:
        assert timing_confidence(0, 0) == pytest.approx(0.3)

    def test_timing_monotone_in_bars(self) -> None:
        values = [timing_confidence(n, 4) for n in range(0, 80, 5)]
        assert values == sorted(values)

    def test_timing_monotone_in_indicators(self) -> None:
        values = [timing_confidence(30, k) for k in range(8)]
        assert values == sorted(values)
