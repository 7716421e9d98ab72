"""Tests for scoring enums, thresholds and weight vectors."""

from __future__ import annotations

import math

import pytest

from tradescore.exceptions import ConfigurationError
from tradescore.scoring import (
    ALL_WEIGHT_VECTORS,
    SIGNAL_LABELS,
    SIGNAL_ORDER,
    TIMING_INDICATOR_WEIGHTS,
    ScoringDomain,
    Signal,
    SignalThresholds,
    WeightVector,
)


class TestSignal:
    def test_order_most_bullish_first(self) -> None:
        assert SIGNAL_ORDER[0] is Signal.STRONG_BUY
        assert SIGNAL_ORDER[-1] is Signal.STRONG_SELL
        assert len(SIGNAL_ORDER) == 5

    def test_every_domain_labels_every_signal(self) -> None:
        for domain in ScoringDomain:
            assert set(SIGNAL_LABELS[domain]) == set(Signal)

    def test_sentiment_labels(self) -> None:
        assert SIGNAL_LABELS[ScoringDomain.SENTIMENT][Signal.BUY] == "WeakBuy"


class TestSignalThresholds:
    def test_defaults(self) -> None:
        t = SignalThresholds()
        assert (t.strong_buy, t.buy, t.hold, t.sell) == (0.6, 0.2, -0.2, -0.6)

    def test_sentiment_preset(self) -> None:
        t = SignalThresholds.for_sentiment()
        assert t.strong_buy == 0.5
        assert t.sell == -0.5

    def test_for_domain_accepts_strings(self) -> None:
        assert SignalThresholds.for_domain("sentiment") == SignalThresholds.for_sentiment()  # type: ignore[arg-type]

    def test_must_decrease(self) -> None:
        with pytest.raises(ConfigurationError, match="strictly decreasing"):
            SignalThresholds(strong_buy=0.2, buy=0.6)

    def test_must_be_in_range(self) -> None:
        with pytest.raises(ConfigurationError, match=r"\[-1, 1\]"):
            SignalThresholds(strong_buy=1.5)

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            SignalThresholds().buy = 0.1  # type: ignore[misc]


class TestWeightVector:
    @pytest.mark.parametrize("vector", ALL_WEIGHT_VECTORS, ids=lambda v: v.version)
    def test_builtin_vectors_sum_to_one(self, vector: WeightVector) -> None:
        assert abs(math.fsum(vector.weights.values()) - 1.0) <= 1e-9
        assert all(w >= 0 for w in vector.weights.values())

    def test_versions_unique(self) -> None:
        versions = [v.version for v in ALL_WEIGHT_VECTORS]
        assert len(versions) == len(set(versions))

    def test_timing_indicators_equal(self) -> None:
        assert len(TIMING_INDICATOR_WEIGHTS) == 8
        assert set(TIMING_INDICATOR_WEIGHTS.weights.values()) == {0.125}

    def test_rejects_bad_sum(self) -> None:
        with pytest.raises(ConfigurationError, match="sum to 1.0"):
            WeightVector(ScoringDomain.TIMING, "bad", {"a": 0.5, "b": 0.4})

    def test_rejects_negative(self) -> None:
        with pytest.raises(ConfigurationError, match="non-negative"):
            WeightVector(ScoringDomain.TIMING, "bad", {"a": 1.5, "b": -0.5})

    def test_weights_read_only(self) -> None:
        vector = WeightVector(ScoringDomain.REGIME, "v", {"a": 1.0})
        with pytest.raises(TypeError):
            vector.weights["a"] = 0.5  # type: ignore[index]

    def test_copy_is_isolated(self) -> None:
        source = {"a": 0.5, "b": 0.5}
        vector = WeightVector(ScoringDomain.REGIME, "v", source)
        source["a"] = 0.9
        assert vector.weights["a"] == 0.5
