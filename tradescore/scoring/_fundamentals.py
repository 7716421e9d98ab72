"""Fundamentals score from financial ratios."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from tradescore.data import FactName, FactSet, fact
from tradescore.scoring._aggregate import SubScores, aggregate, count_present
from tradescore.scoring._classify import classify
from tradescore.scoring._components import linear_score, mean_present
from tradescore.scoring._confidence import completeness_confidence
from tradescore.scoring._config import (
    CONFIDENCE_FLOORS,
    FUNDAMENTALS_WEIGHTS,
    FundamentalsComponent,
    ScoringDomain,
    SignalThresholds,
)
from tradescore.scoring._result import CompositeResult, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricRule:
    """Linear rule scoring one ratio.

    Parameters
    ----------
    fact : FactName
        Fact holding the ratio.
    neutral : float
        Ratio value that scores 0.
    scale : float
        Distance from ``neutral`` that saturates the score at +/-1.
    higher_is_better : bool
        Direction of the rule.
    non_positive_score : float or None
        Fixed score for ratios ``<= 0`` (e.g. negative earnings P/E).
    skip_non_positive : bool
        Treat ratios ``<= 0`` as missing instead.
    """

    fact: FactName
    neutral: float
    scale: float
    higher_is_better: bool = True
    non_positive_score: float | None = None
    skip_non_positive: bool = False

    def score(self, facts: FactSet) -> float | None:
        value = fact(facts, self.fact)
        if value is None:
            return None
        if value <= 0 and self.non_positive_score is not None:
            return self.non_positive_score
        if value <= 0 and self.skip_non_positive:
            return None
        return linear_score(
            value, self.neutral, self.scale, higher_is_better=self.higher_is_better
        )


FUNDAMENTAL_RULES: dict[FundamentalsComponent, tuple[MetricRule, ...]] = {
    FundamentalsComponent.PROFITABILITY: (
        MetricRule(FactName.ROE, 0.10, 0.15),
        MetricRule(FactName.ROA, 0.05, 0.10),
        MetricRule(FactName.NET_PROFIT_MARGIN, 0.08, 0.12),
    ),
    FundamentalsComponent.GROWTH: (
        MetricRule(FactName.REVENUE_GROWTH, 0.05, 0.20),
        MetricRule(FactName.EPS_GROWTH, 0.05, 0.25),
    ),
    FundamentalsComponent.VALUATION: (
        MetricRule(FactName.PE_RATIO, 20.0, 15.0, higher_is_better=False,
                   non_positive_score=-1.0),
        MetricRule(FactName.PB_RATIO, 3.0, 3.0, higher_is_better=False,
                   skip_non_positive=True),
        MetricRule(FactName.PEG_RATIO, 1.5, 1.0, higher_is_better=False,
                   skip_non_positive=True),
    ),
    FundamentalsComponent.FINANCIAL_STRENGTH: (
        MetricRule(FactName.DEBT_TO_EQUITY, 1.0, 1.0, higher_is_better=False),
        MetricRule(FactName.CURRENT_RATIO, 1.5, 1.0),
        MetricRule(FactName.INTEREST_COVERAGE, 5.0, 5.0),
    ),
    FundamentalsComponent.EFFICIENCY: (
        MetricRule(FactName.ASSET_TURNOVER, 0.7, 0.5),
        MetricRule(FactName.INVENTORY_TURNOVER, 6.0, 6.0),
    ),
}


def metric_scores(facts: FactSet) -> dict[str, float | None]:
    """Per-ratio scores keyed by fact name."""
    return {
        rule.fact.value: rule.score(facts)
        for rules in FUNDAMENTAL_RULES.values()
        for rule in rules
    }


def fundamentals_sub_scores(facts: FactSet) -> dict[str, float | None]:
    """Category scores, each the mean of its present ratio scores."""
    return {
        component.value: mean_present(rule.score(facts) for rule in rules)
        for component, rules in FUNDAMENTAL_RULES.items()
    }


def _fundamentals_flags(sub_scores: SubScores, valid: int) -> set[str]:
    flags: set[str] = set()
    if valid < 3:
        flags.add("limited_data")

    def below(component: FundamentalsComponent, limit: float) -> bool:
        value = sub_scores.get(component.value)
        return value is not None and value < limit

    if below(FundamentalsComponent.VALUATION, -0.5):
        flags.add("high_valuation_risk")
    if below(FundamentalsComponent.FINANCIAL_STRENGTH, -0.5):
        flags.add("financial_distress_risk")
    if below(FundamentalsComponent.PROFITABILITY, -0.3):
        flags.add("low_profitability")
    return flags


def score_fundamentals(
    symbol: str,
    facts: FactSet,
    *,
    computed_at: datetime | None = None,
    extra_flags: Iterable[str] = (),
) -> CompositeResult:
    """Compute the fundamentals :class:`CompositeResult` for *symbol*."""
    sub_scores = fundamentals_sub_scores(facts)
    composite = aggregate(sub_scores, FUNDAMENTALS_WEIGHTS)
    signal = classify(composite, SignalThresholds.for_fundamentals())
    valid = count_present(sub_scores, FUNDAMENTALS_WEIGHTS)
    confidence = completeness_confidence(
        valid, len(FUNDAMENTALS_WEIGHTS), CONFIDENCE_FLOORS[ScoringDomain.FUNDAMENTALS]
    )
    flags = _fundamentals_flags(sub_scores, valid)
    flags.update(extra_flags)

    logger.debug("%s fundamentals composite %.4f (%d/5 categories)", symbol, composite, valid)
    return CompositeResult(
        symbol=symbol,
        domain=ScoringDomain.FUNDAMENTALS,
        composite_score=composite,
        signal=signal,
        confidence=confidence,
        sub_scores=sub_scores,
        flags=frozenset(flags),
        computed_at=computed_at or utc_now(),
        weights_version=FUNDAMENTALS_WEIGHTS.version,
        details={"metrics": metric_scores(facts)},
    )
