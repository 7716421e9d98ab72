"""Market-regime score from a benchmark series and market-wide facts."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

import numpy as np

from tradescore.data import FactName, FactSet, PriceSeries, closes, fact
from tradescore.indicators import TREND_DIRECTION_SCORES, classify_trend, period_change_pct
from tradescore.scoring._aggregate import aggregate, count_present
from tradescore.scoring._classify import classify
from tradescore.scoring._components import clamp, linear_score, mean_present
from tradescore.scoring._confidence import completeness_confidence
from tradescore.scoring._config import (
    CONFIDENCE_FLOORS,
    REGIME_MULTIPLIERS,
    REGIME_WEIGHTS,
    MarketRegime,
    RegimeComponent,
    ScoringDomain,
    SignalThresholds,
)
from tradescore.scoring._result import CompositeResult, utc_now

logger = logging.getLogger(__name__)

SHORT_LOOKBACK = 20
MEDIUM_LOOKBACK = 50
TRADING_DAYS = 252


@dataclass(frozen=True)
class RegimeState:
    """Measured market state behind the regime label.

    Parameters
    ----------
    regime : MarketRegime
        Detected regime.
    change_short_pct, change_medium_pct : float or None
        Benchmark change over 20 and 50 bars.
    daily_volatility_pct : float or None
        Standard deviation of the last 20 daily returns, in percent.
    vix : float or None
        Implied volatility index level.
    risk_score : float
        ``min(daily_volatility_pct * 20 + vix * 2, 100)``.
    risk_level : str
        ``"extreme"``, ``"high"``, ``"medium"`` or ``"low"``.
    """

    regime: MarketRegime
    change_short_pct: float | None
    change_medium_pct: float | None
    daily_volatility_pct: float | None
    vix: float | None
    risk_score: float
    risk_level: str

    @property
    def multiplier(self) -> float:
        return REGIME_MULTIPLIERS[self.regime]

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["regime"] = self.regime.value
        data["multiplier"] = self.multiplier
        return data


def _change(values: np.ndarray, lookback: int) -> float | None:
    if values.size < lookback + 1:
        return None
    return period_change_pct(values, lookback)


def _daily_volatility(values: np.ndarray, window: int = SHORT_LOOKBACK) -> float | None:
    """Standard deviation of daily returns as a fraction."""
    if values.size < window + 1:
        return None
    recent = values[-(window + 1):]
    prev = recent[:-1]
    if np.any(prev == 0):
        return None
    return float((np.diff(recent) / prev).std())


def detect_regime(
    change_short: float | None,
    change_medium: float | None,
    daily_vol_pct: float | None,
    vix: float | None,
) -> MarketRegime:
    """Classify the market; volatility checks take precedence over trend."""
    if (daily_vol_pct is not None and daily_vol_pct > 3.0) or (
        vix is not None and vix > 30.0
    ):
        return MarketRegime.VOLATILE
    if daily_vol_pct is not None and daily_vol_pct < 1.0 and vix is not None and vix < 15.0:
        return MarketRegime.STABLE
    if change_short is None or change_medium is None:
        return MarketRegime.TRANSITION
    if change_short > 2.0 and change_medium > 5.0:
        return MarketRegime.BULL
    if change_short < -2.0 and change_medium < -5.0:
        return MarketRegime.BEAR
    if abs(change_short) < 2.0 and abs(change_medium) < 5.0:
        return MarketRegime.SIDEWAYS
    return MarketRegime.TRANSITION


def _risk(daily_vol_pct: float | None, vix: float | None) -> tuple[float, str]:
    score = min((daily_vol_pct or 0.0) * 20.0 + (vix or 0.0) * 2.0, 100.0)
    if score > 80:
        level = "extreme"
    elif score > 60:
        level = "high"
    elif score > 40:
        level = "medium"
    else:
        level = "low"
    return score, level


def regime_state(bars: PriceSeries | None, facts: FactSet) -> RegimeState:
    values = closes(bars) if bars else np.empty(0)
    change_short = _change(values, SHORT_LOOKBACK)
    change_medium = _change(values, MEDIUM_LOOKBACK)
    daily_vol = _daily_volatility(values)
    daily_vol_pct = daily_vol * 100.0 if daily_vol is not None else None
    vix = fact(facts, FactName.VIX)
    risk_score, risk_level = _risk(daily_vol_pct, vix)
    return RegimeState(
        regime=detect_regime(change_short, change_medium, daily_vol_pct, vix),
        change_short_pct=change_short,
        change_medium_pct=change_medium,
        daily_volatility_pct=daily_vol_pct,
        vix=vix,
        risk_score=risk_score,
        risk_level=risk_level,
    )


def regime_sub_scores(
    bars: PriceSeries | None, facts: FactSet
) -> dict[str, float | None]:
    values = closes(bars) if bars else np.empty(0)

    directions: list[float | None] = []
    change_short = _change(values, SHORT_LOOKBACK)
    if change_short is not None:
        directions.append(TREND_DIRECTION_SCORES[classify_trend(change_short, 2.0, 5.0)])
    change_medium = _change(values, MEDIUM_LOOKBACK)
    if change_medium is not None:
        directions.append(TREND_DIRECTION_SCORES[classify_trend(change_medium, 5.0, 10.0)])
    trend = mean_present(directions)

    volatility = linear_score(fact(facts, FactName.VIX), 20.0, 10.0, higher_is_better=False)
    if volatility is None:
        daily_vol = _daily_volatility(values)
        if daily_vol is not None:
            volatility = linear_score(
                daily_vol * math.sqrt(TRADING_DAYS), 0.18, 0.12, higher_is_better=False
            )

    advancing = fact(facts, FactName.ADVANCING_ISSUES)
    declining = fact(facts, FactName.DECLINING_ISSUES)
    breadth = None
    if advancing is not None and declining:
        breadth = linear_score(advancing / declining, 1.0, 1.0)

    fear_greed = fact(facts, FactName.FEAR_GREED)
    sentiment = mean_present(
        [
            linear_score(
                fact(facts, FactName.PUT_CALL_RATIO), 1.0, 0.5, higher_is_better=False
            ),
            clamp((fear_greed - 50.0) / 50.0) if fear_greed is not None else None,
        ]
    )

    return {
        RegimeComponent.TREND.value: trend,
        RegimeComponent.VOLATILITY.value: volatility,
        RegimeComponent.BREADTH.value: breadth,
        RegimeComponent.SENTIMENT.value: sentiment,
    }


def score_regime(
    benchmark: str,
    bars: PriceSeries | None,
    facts: FactSet,
    *,
    computed_at: datetime | None = None,
    extra_flags: Iterable[str] = (),
) -> CompositeResult:
    """Compute the regime :class:`CompositeResult` for the *benchmark* symbol."""
    sub_scores = regime_sub_scores(bars, facts)
    composite = aggregate(sub_scores, REGIME_WEIGHTS)
    signal = classify(composite, SignalThresholds.for_regime())
    valid = count_present(sub_scores, REGIME_WEIGHTS)
    confidence = completeness_confidence(
        valid, len(REGIME_WEIGHTS), CONFIDENCE_FLOORS[ScoringDomain.REGIME]
    )
    state = regime_state(bars, facts)

    flags = {f"regime:{state.regime.value}"}
    if state.risk_level in ("high", "extreme"):
        flags.add("high_risk")
    flags.update(extra_flags)

    logger.debug("%s regime %s, composite %.4f", benchmark, state.regime.value, composite)
    return CompositeResult(
        symbol=benchmark,
        domain=ScoringDomain.REGIME,
        composite_score=composite,
        signal=signal,
        confidence=confidence,
        sub_scores=sub_scores,
        flags=frozenset(flags),
        computed_at=computed_at or utc_now(),
        weights_version=REGIME_WEIGHTS.version,
        details={"state": state.as_dict()},
    )
