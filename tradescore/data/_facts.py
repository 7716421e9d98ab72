"""Named fundamental, earnings and market facts."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Optional
from enum import Enum


class FactName(str, Enum):
    """Facts understood by the scoring domains."""

    # Profitability
    ROE = "roe"
    ROA = "roa"
    NET_PROFIT_MARGIN = "net_profit_margin"
    # Growth
    REVENUE_GROWTH = "revenue_growth"
    EPS_GROWTH = "eps_growth"
    # Valuation
    PE_RATIO = "pe_ratio"
    PB_RATIO = "pb_ratio"
    PEG_RATIO = "peg_ratio"
    # Financial strength
    DEBT_TO_EQUITY = "debt_to_equity"
    CURRENT_RATIO = "current_ratio"
    INTEREST_COVERAGE = "interest_coverage"
    # Efficiency
    ASSET_TURNOVER = "asset_turnover"
    INVENTORY_TURNOVER = "inventory_turnover"
    # Earnings and sentiment
    EPS_ESTIMATE_CURRENT = "eps_estimate_current"
    EPS_ESTIMATE_PRIOR = "eps_estimate_prior"
    SHORT_PERCENT_OF_FLOAT = "short_percent_of_float"
    NEWS_SENTIMENT = "news_sentiment"
    PUT_CALL_RATIO = "put_call_ratio"
    ANALYST_RATING_SCORE = "analyst_rating_score"
    # Market-wide
    VIX = "vix"
    ADVANCING_ISSUES = "advancing_issues"
    DECLINING_ISSUES = "declining_issues"
    FEAR_GREED = "fear_greed"


FactSet = Mapping[str, Optional[float]]


def fact(facts: FactSet, name: FactName | str) -> float | None:
    """Look up *name*, treating missing and non-finite values as absent."""
    key = name.value if isinstance(name, FactName) else name
    value = facts.get(key)
    if value is None:
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value
