"""Tradability safety checks for a single company.

The screen answers one question per symbol: is the stock liquid, stable
and reporting enough to be worth scoring at all?  Five equally weighted
pass/fail checks produce a safety score in [0, 1]; the score together
with the number of failed checks gives a risk level.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

import numpy as np

from tradescore.data import (
    GROSS_PROFIT_MARGIN,
    NET_PROFIT_MARGIN,
    RETURN_ON_ASSETS,
    Bar,
    CompanyProfile,
    RatioSnapshot,
    closes,
    volumes,
)
from tradescore.exceptions import ConfigurationError
from tradescore.scoring import utc_now


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "VeryHigh"


class Rating(str, Enum):
    """Three-step rating used for volatility and liquidity."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class SafetyCheck(str, Enum):
    RECENT_EARNINGS = "recent_earnings"
    POSITIVE_REVENUE = "positive_revenue"
    STABLE_PRICE = "stable_price"
    SUFFICIENT_VOLUME = "sufficient_volume"
    ANALYST_COVERAGE = "analyst_coverage"


CHECK_WEIGHTS: Mapping[SafetyCheck, float] = MappingProxyType(
    {check: 0.2 for check in SafetyCheck}
)

# (minimum score, maximum failed checks) per level, most lenient last.
RISK_BANDS: tuple[tuple[RiskLevel, float, int], ...] = (
    (RiskLevel.LOW, 0.8, 1),
    (RiskLevel.MEDIUM, 0.6, 2),
    (RiskLevel.HIGH, 0.4, 3),
)


@dataclass(frozen=True)
class SafetyConfig:
    """Windows and thresholds of the safety screen.

    Parameters
    ----------
    price_window : int
        Most recent closes used for the stability and volatility checks.
    max_relative_std : float
        A price is stable when the population std of the window is below
        this fraction of its mean.
    volume_window : int
        Most recent bars averaged for the volume checks.
    min_average_volume : float
        Average volume needed for ``sufficient_volume`` and a MEDIUM
        liquidity rating.
    high_liquidity_volume : float
        Average volume giving a HIGH liquidity rating.
    low_volatility_pct, medium_volatility_pct : float
        Upper bounds (exclusive, in percent of the mean) of the LOW and
        MEDIUM volatility ratings.
    min_safe_score : float
        Minimum safety score for a stock to be safe to trade.
    """

    price_window: int = 30
    max_relative_std: float = 0.05
    volume_window: int = 10
    min_average_volume: float = 100_000
    high_liquidity_volume: float = 1_000_000
    low_volatility_pct: float = 2.0
    medium_volatility_pct: float = 5.0
    min_safe_score: float = 0.6

    def __post_init__(self) -> None:
        if self.price_window < 2 or self.volume_window < 1:
            raise ConfigurationError(
                f"windows too short: price_window={self.price_window}, "
                f"volume_window={self.volume_window}"
            )
        if not self.min_average_volume <= self.high_liquidity_volume:
            raise ConfigurationError(
                "min_average_volume must not exceed high_liquidity_volume"
            )
        if not 0 < self.low_volatility_pct < self.medium_volatility_pct:
            raise ConfigurationError(
                "volatility bounds must satisfy 0 < low < medium, got "
                f"{self.low_volatility_pct}, {self.medium_volatility_pct}"
            )
        if not 0.0 <= self.min_safe_score <= 1.0:
            raise ConfigurationError(
                f"min_safe_score must lie in [0, 1], got {self.min_safe_score}"
            )


@dataclass(frozen=True)
class SafetyAssessment:
    """Outcome of the safety screen for one symbol.

    ``checks`` maps every :class:`SafetyCheck` to whether it passed.
    """

    profile: CompanyProfile
    safety_score: float
    checks: Mapping[SafetyCheck, bool]
    risk_level: RiskLevel
    volatility_rating: Rating
    liquidity_rating: Rating
    is_safe_to_trade: bool
    reasoning: str = ""
    warning_flags: frozenset[str] = frozenset()
    missing_data: tuple[str, ...] = ()
    assessed_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        object.__setattr__(self, "checks", MappingProxyType(dict(self.checks)))
        object.__setattr__(self, "warning_flags", frozenset(self.warning_flags))

    @property
    def symbol(self) -> str:
        return self.profile.symbol

    @property
    def failed_checks(self) -> list[SafetyCheck]:
        return [check for check, passed in self.checks.items() if not passed]

    def to_record(self) -> dict[str, Any]:
        """Flat JSON-safe row as written to the screening history table."""
        record: dict[str, Any] = {
            "symbol": self.profile.symbol,
            "company_name": self.profile.name,
            "sector": self.profile.sector,
            "industry": self.profile.industry,
            "market_cap": self.profile.market_cap,
            "current_price": self.profile.price,
            "is_safe_to_trade": self.is_safe_to_trade,
            "safety_score": round(self.safety_score, 2),
            "safety_reasoning": self.reasoning,
            "risk_level": self.risk_level.value,
            "volatility_rating": self.volatility_rating.value,
            "liquidity_rating": self.liquidity_rating.value,
            "warning_flags": sorted(self.warning_flags),
            "missing_data_components": list(self.missing_data),
            "analysis_date": self.assessed_at.isoformat(),
        }
        for check, passed in self.checks.items():
            record[f"has_{check.value}"] = passed
        return record


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def _positive(ratios: Optional[RatioSnapshot], key: str) -> bool:
    value = ratios.get(key) if ratios else None
    return value is not None and np.isfinite(value) and value > 0


def has_recent_earnings(profile: CompanyProfile, ratios: Optional[RatioSnapshot]) -> bool:
    """A reported ratio row, or at least a sector and industry classification."""
    return ratios is not None or profile.is_classified


def has_positive_revenue(ratios: Optional[RatioSnapshot]) -> bool:
    """Positive gross margin, net margin or return on assets."""
    return any(
        _positive(ratios, key)
        for key in (GROSS_PROFIT_MARGIN, NET_PROFIT_MARGIN, RETURN_ON_ASSETS)
    )


def has_analyst_coverage(profile: CompanyProfile) -> bool:
    return profile.is_classified and profile.description is not None


def relative_std(bars: Sequence[Bar], window: int) -> float | None:
    """Population std of the last *window* closes over their mean."""
    if len(bars) < window:
        return None
    recent = closes(bars[-window:])
    mean = float(recent.mean())
    if mean <= 0:
        return None
    return float(recent.std()) / mean


def average_volume(bars: Sequence[Bar], window: int) -> float | None:
    if len(bars) < window:
        return None
    return float(volumes(bars[-window:]).mean())


def volatility_rating(rel_std: float | None, config: SafetyConfig) -> Rating:
    if rel_std is None:
        return Rating.HIGH
    pct = rel_std * 100.0
    if pct < config.low_volatility_pct:
        return Rating.LOW
    if pct < config.medium_volatility_pct:
        return Rating.MEDIUM
    return Rating.HIGH


def liquidity_rating(avg_volume: float | None, config: SafetyConfig) -> Rating:
    if avg_volume is None:
        return Rating.LOW
    if avg_volume >= config.high_liquidity_volume:
        return Rating.HIGH
    if avg_volume >= config.min_average_volume:
        return Rating.MEDIUM
    return Rating.LOW


def safety_score(checks: Mapping[SafetyCheck, bool]) -> float:
    """Weighted share of passed checks."""
    total = sum(CHECK_WEIGHTS[check] for check in checks)
    if total <= 0:
        return 0.0
    passed = sum(CHECK_WEIGHTS[check] for check, ok in checks.items() if ok)
    return round(passed / total, 10)


def risk_level(score: float, failed: int) -> RiskLevel:
    for level, min_score, max_failed in RISK_BANDS:
        if score >= min_score and failed <= max_failed:
            return level
    return RiskLevel.VERY_HIGH


def _assessment_text(score: float) -> str:
    if score >= 0.8:
        return "EXCELLENT - very safe for trading"
    if score >= 0.6:
        return "GOOD - safe for trading with caution"
    if score >= 0.4:
        return "MODERATE - requires careful analysis"
    return "POOR - not recommended for trading"


def explain(checks: Mapping[SafetyCheck, bool], score: float) -> str:
    """Human-readable summary of the checks and the overall score."""
    lines = [f"Safety score: {score:.2f} ({int(score * 100)}%)", "", "Safety checks:"]
    for check, passed in checks.items():
        label = check.value.replace("_", " ").upper()
        weight = int(round(CHECK_WEIGHTS[check] * 100))
        lines.append(f"- {label}: {'PASS' if passed else 'FAIL'} ({weight}% weight)")
    lines += ["", f"Overall assessment: {_assessment_text(score)}"]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Assessment
# ---------------------------------------------------------------------------


def assess_safety(
    profile: CompanyProfile,
    ratios: Optional[RatioSnapshot],
    bars: Sequence[Bar],
    config: SafetyConfig | None = None,
    *,
    assessed_at: datetime | None = None,
) -> SafetyAssessment:
    """Run every safety check for *profile*.

    Parameters
    ----------
    profile : CompanyProfile
        Descriptive company data.
    ratios : RatioSnapshot or None
        Latest reported ratios; ``None`` when the company reports none.
    bars : Sequence[Bar]
        Daily bars, oldest first.
    config : SafetyConfig or None
        Windows and thresholds; defaults to :class:`SafetyConfig`.

    Returns
    -------
    SafetyAssessment
        A stock is safe to trade when its score reaches
        ``config.min_safe_score``, it has recent earnings and positive
        revenue, and its risk level is not VERY_HIGH.
    """
    config = config or SafetyConfig()
    rel_std = relative_std(bars, config.price_window)
    avg_volume = average_volume(bars, config.volume_window)

    checks = {
        SafetyCheck.RECENT_EARNINGS: has_recent_earnings(profile, ratios),
        SafetyCheck.POSITIVE_REVENUE: has_positive_revenue(ratios),
        SafetyCheck.STABLE_PRICE: (
            rel_std is not None and rel_std < config.max_relative_std
        ),
        SafetyCheck.SUFFICIENT_VOLUME: (
            avg_volume is not None and avg_volume >= config.min_average_volume
        ),
        SafetyCheck.ANALYST_COVERAGE: has_analyst_coverage(profile),
    }
    score = safety_score(checks)
    failed = sum(not ok for ok in checks.values())
    level = risk_level(score, failed)

    missing: list[str] = []
    if ratios is None:
        missing.append("ratios")
    if not profile.is_classified:
        missing.append("profile")
    if len(bars) < config.price_window:
        missing.append("prices")

    flags: set[str] = set()
    if bars and len(bars) < config.price_window:
        flags.add("short_price_history")
    if not bars:
        flags.add("no_price_history")

    safe = (
        score >= config.min_safe_score
        and checks[SafetyCheck.RECENT_EARNINGS]
        and checks[SafetyCheck.POSITIVE_REVENUE]
        and level is not RiskLevel.VERY_HIGH
    )
    return SafetyAssessment(
        profile=profile,
        safety_score=score,
        checks=checks,
        risk_level=level,
        volatility_rating=volatility_rating(rel_std, config),
        liquidity_rating=liquidity_rating(avg_volume, config),
        is_safe_to_trade=safe,
        reasoning=explain(checks, score),
        warning_flags=frozenset(flags),
        missing_data=tuple(missing),
        assessed_at=assessed_at or utc_now(),
    )
