"""Market-structure analytics: trend, support/resistance, volume and risk."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

import numpy as np

from tradescore.data import Bar, closes
from tradescore.indicators._config import (
    TREND_DIRECTION_SCORES,
    PriceVolumeRelationship,
    RiskLevel,
    TrendDirection,
    VolumeTrend,
)

# Minimum bars before trend and support/resistance are measured.
MIN_STRUCTURE_BARS = 20


def _plain(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v.value if isinstance(v, Enum) else v for k, v in data.items()}


def _daily_returns(prices: np.ndarray) -> np.ndarray:
    prev = prices[:-1]
    diff = np.diff(prices)
    return np.divide(diff, prev, out=np.zeros_like(diff), where=prev != 0)


# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrendAnalysis:
    """Multi-horizon trend summary.

    Parameters
    ----------
    short_term, medium_term, long_term : TrendDirection
        Direction over the short, medium and long horizon.
    strength : float
        Percentage of up days over the last 10 bars.
    consistency : float
        ``100 - 1000 * stdev(daily returns)`` over the same bars, in [0, 100].
    score : float
        Mean direction score over the three horizons, in [-1, 1].
    """

    short_term: TrendDirection
    medium_term: TrendDirection
    long_term: TrendDirection
    strength: float
    consistency: float
    score: float

    def as_dict(self) -> dict[str, Any]:
        return _plain(asdict(self))


def period_change_pct(prices: Sequence[float] | np.ndarray, lookback: int) -> float:
    """Percent change of the latest price against the price *lookback* bars earlier."""
    values = np.asarray(prices, dtype=np.float64)
    if values.size < 2:
        return 0.0
    start = values[max(0, values.size - 1 - lookback)]
    if start == 0:
        return 0.0
    return float((values[-1] - start) / start * 100.0)


def classify_trend(
    change_pct: float, moderate: float = 2.0, strong: float = 5.0
) -> TrendDirection:
    """Bucket a percent change into a :class:`TrendDirection`."""
    if change_pct > strong:
        return TrendDirection.STRONG_BULLISH
    if change_pct > moderate:
        return TrendDirection.BULLISH
    if change_pct < -strong:
        return TrendDirection.STRONG_BEARISH
    if change_pct < -moderate:
        return TrendDirection.BEARISH
    return TrendDirection.NEUTRAL


def analyze_trend(
    prices: Sequence[float] | np.ndarray,
    horizons: tuple[int, int, int] = (5, 15, 30),
) -> TrendAnalysis | None:
    """Trend directions over three horizons; ``None`` below 20 bars."""
    values = np.asarray(prices, dtype=np.float64)
    n = values.size
    if n < MIN_STRUCTURE_BARS:
        return None

    short, medium, long = horizons
    directions = (
        classify_trend(period_change_pct(values, short)),
        classify_trend(period_change_pct(values, medium)),
        classify_trend(period_change_pct(values, min(long, n - 1))),
    )
    score = float(np.mean([TREND_DIRECTION_SCORES[d] for d in directions]))

    daily = _daily_returns(values[-11:])
    strength = float((daily > 0).sum() / daily.size * 100.0)
    consistency = float(np.clip(100.0 - daily.std() * 1000.0, 0.0, 100.0))

    return TrendAnalysis(*directions, strength=strength, consistency=consistency, score=score)


# ---------------------------------------------------------------------------
# Support / resistance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SupportResistance:
    support: float
    resistance: float
    support_touches: int
    resistance_touches: int
    distance_to_support_pct: float
    distance_to_resistance_pct: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def support_resistance(
    bars: Sequence[Bar], window: int = 50, tolerance: float = 0.02
) -> SupportResistance | None:
    """Lowest low and highest high of the trailing *window* with touch counts.

    Below 20 bars the levels default to 5% either side of the price.
    """
    if not bars:
        return None
    price = bars[-1].close

    if len(bars) < MIN_STRUCTURE_BARS:
        support, resistance = price * 0.95, price * 1.05
        support_touches = resistance_touches = 0
    else:
        recent = bars[-window:]
        support = min(b.low for b in recent)
        resistance = max(b.high for b in recent)
        support_touches = sum(
            abs(b.low - support) <= support * tolerance for b in recent
        )
        resistance_touches = sum(
            abs(b.high - resistance) <= resistance * tolerance for b in recent
        )

    if price > 0:
        to_support = (price - support) / price * 100.0
        to_resistance = (resistance - price) / price * 100.0
    else:
        to_support = to_resistance = 0.0

    return SupportResistance(
        support=float(support),
        resistance=float(resistance),
        support_touches=int(support_touches),
        resistance_touches=int(resistance_touches),
        distance_to_support_pct=float(to_support),
        distance_to_resistance_pct=float(to_resistance),
    )


# ---------------------------------------------------------------------------
# Volume
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VolumeAnalysis:
    current_volume: float
    average_volume: float
    ratio: float
    trend: VolumeTrend
    relationship: PriceVolumeRelationship

    def as_dict(self) -> dict[str, Any]:
        return _plain(asdict(self))


def analyze_volume(bars: Sequence[Bar], window: int = 20) -> VolumeAnalysis | None:
    """Latest volume against the average of the *window* bars before it."""
    if len(bars) < 2:
        return None
    current = float(bars[-1].volume)
    prior = bars[-(window + 1):-1]
    average = float(np.mean([b.volume for b in prior]))
    ratio = current / average if average > 0 else 1.0

    if ratio > 1.2:
        trend = VolumeTrend.INCREASING
    elif ratio < 0.8:
        trend = VolumeTrend.DECREASING
    else:
        trend = VolumeTrend.STABLE

    change = bars[-1].close - bars[-2].close
    relationship = PriceVolumeRelationship.NEUTRAL
    if change > 0 and trend is VolumeTrend.INCREASING:
        relationship = PriceVolumeRelationship.BULLISH_CONFIRMATION
    elif change > 0 and trend is VolumeTrend.DECREASING:
        relationship = PriceVolumeRelationship.WEAK_RALLY
    elif change < 0 and trend is VolumeTrend.INCREASING:
        relationship = PriceVolumeRelationship.BEARISH_CONFIRMATION
    elif change < 0 and trend is VolumeTrend.DECREASING:
        relationship = PriceVolumeRelationship.WEAK_DECLINE

    return VolumeAnalysis(current, average, float(ratio), trend, relationship)


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RiskAssessment:
    """ATR-based risk profile of the latest bar.

    Parameters
    ----------
    volatility_pct : float
        ATR as a percentage of the latest close.
    volatility_score : float
        100, 75, 50 or 25 for volatility below 2%, 4%, 6% and above.
    risk_level : RiskLevel
        Bucket matching ``volatility_score``.
    max_drawdown_pct : float
        Largest peak-to-trough decline over the series.
    stop_loss : float
        Two ATRs below the close (8% below when ATR is zero).
    risk_reward : float
        Distance to the 20-bar high over the distance to the stop.
    """

    volatility_pct: float
    volatility_score: float
    risk_level: RiskLevel
    max_drawdown_pct: float
    stop_loss: float
    risk_reward: float

    def as_dict(self) -> dict[str, Any]:
        return _plain(asdict(self))


def max_drawdown_pct(prices: Sequence[float] | np.ndarray) -> float:
    """Largest peak-to-trough decline in percent."""
    values = np.asarray(prices, dtype=np.float64)
    if values.size < 2:
        return 0.0
    peaks = np.maximum.accumulate(values)
    drawdowns = np.divide(
        peaks - values, peaks, out=np.zeros_like(values), where=peaks > 0
    )
    return float(drawdowns.max() * 100.0)


def assess_risk(bars: Sequence[Bar], atr_value: float) -> RiskAssessment | None:
    if not bars:
        return None
    price = bars[-1].close
    volatility = atr_value / price * 100.0 if price > 0 else 0.0

    if volatility < 2.0:
        score, level = 100.0, RiskLevel.LOW
    elif volatility < 4.0:
        score, level = 75.0, RiskLevel.MEDIUM
    elif volatility < 6.0:
        score, level = 50.0, RiskLevel.HIGH
    else:
        score, level = 25.0, RiskLevel.VERY_HIGH

    stop = price - 2.0 * atr_value if atr_value > 0 else price * 0.92
    target = max(b.high for b in bars[-20:])
    risk = price - stop
    reward = target - price
    risk_reward = max(reward / risk, 0.0) if risk > 0 else 0.0

    return RiskAssessment(
        volatility_pct=float(volatility),
        volatility_score=score,
        risk_level=level,
        max_drawdown_pct=max_drawdown_pct(closes(bars)),
        stop_loss=float(stop),
        risk_reward=float(risk_reward),
    )
