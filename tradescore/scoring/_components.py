"""Map raw indicator values and financial ratios to sub-scores in [-1, 1].

Every scorer returns ``None`` when its inputs are absent so that the
aggregator can tell a missing sub-score from a computed neutral one.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence


def clamp(value: float, lower: float = -1.0, upper: float = 1.0) -> float:
    """Clamp *value* into ``[lower, upper]``; NaN becomes 0.0."""
    if math.isnan(value):
        return 0.0
    return max(lower, min(upper, value))


def mean_present(values: Iterable[float | None]) -> float | None:
    """Mean of the non-``None`` values, or ``None`` if there are none."""
    present = [v for v in values if v is not None]
    if not present:
        return None
    return math.fsum(present) / len(present)


# ---------------------------------------------------------------------------
# Generic ratio rules
# ---------------------------------------------------------------------------


def linear_score(
    value: float | None,
    neutral: float,
    scale: float,
    *,
    higher_is_better: bool = True,
) -> float | None:
    """``clamp((value - neutral) / scale)``, sign-flipped when lower is better."""
    if value is None or scale == 0:
        return None
    score = (value - neutral) / scale
    return clamp(score if higher_is_better else -score)


def ratio_change(current: float | None, prior: float | None) -> float | None:
    """Relative change ``(current - prior) / |prior|`` clamped to [-1, 1]."""
    if current is None or prior is None or prior == 0:
        return None
    return clamp((current - prior) / abs(prior))


def score_oscillator(
    value: float | None,
    overbought: float,
    oversold: float,
    span: float,
) -> float | None:
    """Graded overbought/oversold mapping, 0 inside the neutral band."""
    if value is None:
        return None
    if value > overbought:
        return clamp(-(value - overbought) / span)
    if value < oversold:
        return clamp((oversold - value) / span)
    return 0.0


# ---------------------------------------------------------------------------
# Technical indicators
# ---------------------------------------------------------------------------


def score_rsi(value: float | None) -> float | None:
    return score_oscillator(value, overbought=70.0, oversold=30.0, span=30.0)


def score_stochastic(k: float | None, d: float | None) -> float | None:
    """Score the average of %K and %D on the 80/20 bands."""
    if k is None or d is None:
        return None
    return score_oscillator((k + d) / 2.0, overbought=80.0, oversold=20.0, span=20.0)


def score_williams_r(value: float | None) -> float | None:
    """Williams %R on the -20/-80 bands; near 0 is overbought."""
    return score_oscillator(value, overbought=-20.0, oversold=-80.0, span=20.0)


def score_macd(line: float | None, signal: float | None) -> float | None:
    """Sign and magnitude of the histogram, clamped."""
    if line is None or signal is None:
        return None
    return clamp(line - signal)


def score_bollinger(
    price: float | None,
    upper: float | None,
    middle: float | None,
    lower: float | None,
) -> float | None:
    """Band position inverted: near the upper band is bearish."""
    if price is None or upper is None or middle is None or lower is None:
        return None
    width = upper - lower
    if width == 0:
        return 0.0
    position = (price - middle) / width
    if position > 0.5:
        return -1.0
    if position < -0.5:
        return 1.0
    return clamp(-2.0 * position)


def score_moving_averages(
    price: float | None,
    averages: Sequence[tuple[float | None, float]],
) -> float | None:
    """Weighted vote of price above (+) or below (-) each average.

    *averages* holds ``(sma, weight)`` pairs; weights are renormalized
    over the averages that are present.
    """
    if price is None:
        return None
    votes = [(sma, w) for sma, w in averages if sma is not None]
    total = math.fsum(w for _, w in votes)
    if total == 0:
        return None
    score = 0.0
    for sma, w in votes:
        if price > sma:
            score += w
        elif price < sma:
            score -= w
    return clamp(score / total)


def score_atr(atr: float | None, baseline: float | None) -> float | None:
    """Volatility bias: ATR well above its baseline is bearish."""
    if atr is None or baseline is None:
        return None
    if baseline == 0:
        return 0.0
    ratio = atr / baseline
    if ratio > 2.0:
        return -1.0
    if ratio < 0.5:
        return 0.5
    return clamp(-(ratio - 1.0))


def score_volume(ratio: float | None, price_change: float | None) -> float | None:
    """Volume surges confirm the direction of the latest price move."""
    if ratio is None or price_change is None:
        return None
    if price_change > 0:
        if ratio > 1.5:
            return 1.0
        if ratio < 0.7:
            return -0.5
        return clamp((ratio - 1.0) * 2.0)
    if price_change < 0:
        if ratio > 1.5:
            return -1.0
        if ratio < 0.7:
            return 0.5
        return clamp(-(ratio - 1.0) * 2.0)
    if ratio > 1.2:
        return 0.2
    if ratio < 0.8:
        return -0.2
    return 0.0
