"""Technical timing score from a single price series."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from tradescore.data import PriceSeries, closes
from tradescore.indicators import (
    MIN_STRUCTURE_BARS,
    SMA_KEYS,
    IndicatorConfig,
    IndicatorSet,
    RiskLevel,
    analyze_trend,
    analyze_volume,
    assess_risk,
    compute_indicators,
    count_core_indicators,
    support_resistance,
)
from tradescore.scoring._aggregate import SubScores, aggregate, weighted_mean
from tradescore.scoring._classify import classify
from tradescore.scoring._components import (
    score_atr,
    score_bollinger,
    score_macd,
    score_moving_averages,
    score_rsi,
    score_stochastic,
    score_volume,
    score_williams_r,
)
from tradescore.scoring._confidence import timing_confidence
from tradescore.scoring._config import (
    MA_ALIGNMENT_WEIGHTS,
    POSITION_SIZES,
    TIMING_INDICATOR_WEIGHTS,
    TIMING_WEIGHTS,
    ScoringDomain,
    SignalThresholds,
    TimingComponent,
)
from tradescore.scoring._result import CompositeResult, utc_now

logger = logging.getLogger(__name__)

TREND_KEY = "trend"


def timing_sub_scores(indicators: IndicatorSet) -> dict[str, float | None]:
    """Score each of the eight timing indicators."""
    close = indicators.get("close")
    return {
        TimingComponent.RSI.value: score_rsi(indicators.get("rsi")),
        TimingComponent.MACD.value: score_macd(
            indicators.get("macd"), indicators.get("macd_signal")
        ),
        TimingComponent.BOLLINGER.value: score_bollinger(
            close,
            indicators.get("bollinger_upper"),
            indicators.get("bollinger_middle"),
            indicators.get("bollinger_lower"),
        ),
        TimingComponent.MOVING_AVERAGES.value: score_moving_averages(
            close,
            [(indicators.get(k), w) for k, w in zip(SMA_KEYS, MA_ALIGNMENT_WEIGHTS)],
        ),
        TimingComponent.STOCHASTIC.value: score_stochastic(
            indicators.get("stochastic_k"), indicators.get("stochastic_d")
        ),
        TimingComponent.WILLIAMS_R.value: score_williams_r(indicators.get("williams_r")),
        TimingComponent.ATR.value: score_atr(
            indicators.get("atr"), indicators.get("atr_baseline")
        ),
        TimingComponent.VOLUME.value: score_volume(
            indicators.get("volume_ratio"), indicators.get("price_change")
        ),
    }


def timing_composite(indicator_scores: SubScores, trend_score: float | None) -> float:
    """70% equal-weighted indicator average, 30% multi-horizon trend."""
    indicators_score = weighted_mean(indicator_scores, TIMING_INDICATOR_WEIGHTS)
    return aggregate(
        {"indicators": indicators_score, TREND_KEY: trend_score}, TIMING_WEIGHTS
    )


def _timing_flags(
    bar_count: int, indicators: IndicatorSet, risk_level: RiskLevel | None
) -> set[str]:
    flags: set[str] = set()
    if bar_count < MIN_STRUCTURE_BARS:
        flags.add("insufficient_history")

    value = indicators.get("rsi")
    if value is not None and value > 70:
        flags.add("rsi_overbought")
    elif value is not None and value < 30:
        flags.add("rsi_oversold")

    k = indicators.get("stochastic_k")
    if k is not None and k >= 80:
        flags.add("stochastic_overbought")
    elif k is not None and k <= 20:
        flags.add("stochastic_oversold")

    if risk_level in (RiskLevel.HIGH, RiskLevel.VERY_HIGH):
        flags.add("high_volatility")
    return flags


def score_timing(
    symbol: str,
    bars: PriceSeries,
    *,
    config: IndicatorConfig | None = None,
    computed_at: datetime | None = None,
    extra_flags: Iterable[str] = (),
) -> CompositeResult:
    """Compute the timing :class:`CompositeResult` for *symbol*.

    Parameters
    ----------
    symbol : str
        Ticker being analyzed.
    bars : PriceSeries
        Ascending OHLCV bars; short series degrade to fewer sub-scores.
    config : IndicatorConfig or None
        Indicator windows.  Defaults to ``IndicatorConfig()``.
    computed_at : datetime or None
        Analysis time.  Defaults to now (UTC).
    extra_flags : Iterable[str]
        Flags raised while gathering inputs.
    """
    indicators = compute_indicators(bars, config)
    sub_scores = timing_sub_scores(indicators)

    trend = analyze_trend(closes(bars))
    trend_score = trend.score if trend is not None else None
    sub_scores[TREND_KEY] = trend_score

    composite = timing_composite(sub_scores, trend_score)
    thresholds = SignalThresholds.for_timing()
    signal = classify(composite, thresholds)
    confidence = timing_confidence(len(bars), count_core_indicators(indicators))

    atr_value = indicators.get("atr") or 0.0
    risk = assess_risk(bars, atr_value)
    levels = support_resistance(bars)
    volume = analyze_volume(bars)

    details: Mapping[str, Any] = {
        "bar_count": len(bars),
        "indicators": dict(indicators),
        "indicators_score": weighted_mean(sub_scores, TIMING_INDICATOR_WEIGHTS),
        "trend": trend.as_dict() if trend is not None else None,
        "support_resistance": levels.as_dict() if levels is not None else None,
        "volume": volume.as_dict() if volume is not None else None,
        "risk": risk.as_dict() if risk is not None else None,
        "position_size": POSITION_SIZES[ScoringDomain.TIMING][signal],
    }

    flags = _timing_flags(len(bars), indicators, risk.risk_level if risk else None)
    flags.update(extra_flags)

    logger.debug(
        "%s timing composite %.4f (%s, confidence %.2f)",
        symbol, composite, signal.value, confidence,
    )
    return CompositeResult(
        symbol=symbol,
        domain=ScoringDomain.TIMING,
        composite_score=composite,
        signal=signal,
        confidence=confidence,
        sub_scores=sub_scores,
        flags=frozenset(flags),
        computed_at=computed_at or utc_now(),
        weights_version=TIMING_WEIGHTS.version,
        details=details,
    )
