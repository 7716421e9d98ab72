"""Quantitative sentiment score: earnings revisions, relative strength,
short interest and options flow."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime

import numpy as np

from tradescore.data import FactName, FactSet, PriceSeries, closes, fact
from tradescore.indicators import period_change_pct, rsi
from tradescore.scoring._aggregate import SubScores, aggregate, count_present
from tradescore.scoring._classify import classify
from tradescore.scoring._components import (
    clamp,
    linear_score,
    ratio_change,
    score_rsi,
)
from tradescore.scoring._confidence import completeness_confidence
from tradescore.scoring._config import (
    CONFIDENCE_FLOORS,
    POSITION_SIZES,
    SENTIMENT_WEIGHTS,
    ScoringDomain,
    SentimentComponent,
    SignalThresholds,
)
from tradescore.scoring._result import CompositeResult, utc_now

logger = logging.getLogger(__name__)

RELATIVE_STRENGTH_LOOKBACK = 14


def relative_strength_score(prices: Sequence[float] | np.ndarray) -> float | None:
    """70% RSI reading plus 30% 14-bar momentum (10% move = full score)."""
    values = np.asarray(prices, dtype=np.float64)
    if values.size < RELATIVE_STRENGTH_LOOKBACK + 1:
        return None
    rsi_component = score_rsi(rsi(values, RELATIVE_STRENGTH_LOOKBACK))
    momentum = clamp(period_change_pct(values, RELATIVE_STRENGTH_LOOKBACK) / 10.0)
    return clamp(0.7 * rsi_component + 0.3 * momentum)


def _with_fallback(primary: float | None, fallback: float | None) -> float | None:
    if primary is not None:
        return primary
    return clamp(fallback) if fallback is not None else None


def sentiment_sub_scores(
    bars: PriceSeries | None, facts: FactSet
) -> dict[str, float | None]:
    """Sentiment components; missing inputs yield ``None``.

    Short interest falls back to news sentiment and options flow to the
    analyst rating score when the primary fact is missing.
    """
    earnings = ratio_change(
        fact(facts, FactName.EPS_ESTIMATE_CURRENT),
        fact(facts, FactName.EPS_ESTIMATE_PRIOR),
    )
    strength = relative_strength_score(closes(bars)) if bars else None
    short_interest = _with_fallback(
        linear_score(
            fact(facts, FactName.SHORT_PERCENT_OF_FLOAT), 0.10, 0.10,
            higher_is_better=False,
        ),
        fact(facts, FactName.NEWS_SENTIMENT),
    )
    options_flow = _with_fallback(
        linear_score(
            fact(facts, FactName.PUT_CALL_RATIO), 1.0, 0.5, higher_is_better=False
        ),
        fact(facts, FactName.ANALYST_RATING_SCORE),
    )
    return {
        SentimentComponent.EARNINGS_REVISIONS.value: earnings,
        SentimentComponent.RELATIVE_STRENGTH.value: strength,
        SentimentComponent.SHORT_INTEREST.value: short_interest,
        SentimentComponent.OPTIONS_FLOW.value: options_flow,
    }


def sentiment_composite(sub_scores: SubScores) -> float:
    return aggregate(sub_scores, SENTIMENT_WEIGHTS)


def score_sentiment(
    symbol: str,
    bars: PriceSeries | None,
    facts: FactSet,
    *,
    computed_at: datetime | None = None,
    extra_flags: Iterable[str] = (),
) -> CompositeResult:
    """Compute the sentiment :class:`CompositeResult` for *symbol*."""
    sub_scores = sentiment_sub_scores(bars, facts)
    composite = sentiment_composite(sub_scores)
    signal = classify(composite, SignalThresholds.for_sentiment())
    valid = count_present(sub_scores, SENTIMENT_WEIGHTS)
    confidence = completeness_confidence(
        valid, len(SENTIMENT_WEIGHTS), CONFIDENCE_FLOORS[ScoringDomain.SENTIMENT]
    )

    flags = set(extra_flags)
    if sub_scores[SentimentComponent.EARNINGS_REVISIONS.value] is None:
        flags.add("no_earnings_data")
    if sub_scores[SentimentComponent.SHORT_INTEREST.value] is None:
        flags.add("no_short_data")
    if sub_scores[SentimentComponent.OPTIONS_FLOW.value] is None:
        flags.add("no_options_data")

    logger.debug("%s sentiment composite %.4f from %d components", symbol, composite, valid)
    return CompositeResult(
        symbol=symbol,
        domain=ScoringDomain.SENTIMENT,
        composite_score=composite,
        signal=signal,
        confidence=confidence,
        sub_scores=sub_scores,
        flags=frozenset(flags),
        computed_at=computed_at or utc_now(),
        weights_version=SENTIMENT_WEIGHTS.version,
        details={"position_size": POSITION_SIZES[ScoringDomain.SENTIMENT][signal]},
    )
