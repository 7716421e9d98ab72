"""Tradability safety screen producing symbol universes for batch runs."""

from tradescore.screening._safety import (
    CHECK_WEIGHTS,
    Rating,
    RiskLevel,
    SafetyAssessment,
    SafetyCheck,
    SafetyConfig,
    assess_safety,
    average_volume,
    liquidity_rating,
    relative_std,
    risk_level,
    safety_score,
    volatility_rating,
)
from tradescore.screening._screener import SafetyScreener, ScreeningReport

__all__ = [
    "CHECK_WEIGHTS",
    "Rating",
    "RiskLevel",
    "SafetyAssessment",
    "SafetyCheck",
    "SafetyConfig",
    "SafetyScreener",
    "ScreeningReport",
    "assess_safety",
    "average_volume",
    "liquidity_rating",
    "relative_std",
    "risk_level",
    "safety_score",
    "volatility_rating",
]
