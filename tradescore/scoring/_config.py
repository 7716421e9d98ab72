"""Signals, thresholds and versioned weight vectors for every scoring domain."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from tradescore.exceptions import ConfigurationError

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ScoringDomain(str, Enum):
    """Independent composite scores produced per symbol."""

    TIMING = "timing"
    SENTIMENT = "sentiment"
    FUNDAMENTALS = "fundamentals"
    REGIME = "regime"


class Signal(str, Enum):
    """Five ordered trading signals, most bullish first."""

    STRONG_BUY = "strong_buy"
    BUY = "buy"
    HOLD = "hold"
    SELL = "sell"
    STRONG_SELL = "strong_sell"


class TimingComponent(str, Enum):
    RSI = "rsi"
    MACD = "macd"
    BOLLINGER = "bollinger"
    MOVING_AVERAGES = "moving_averages"
    STOCHASTIC = "stochastic"
    WILLIAMS_R = "williams_r"
    ATR = "atr"
    VOLUME = "volume"


class SentimentComponent(str, Enum):
    EARNINGS_REVISIONS = "earnings_revisions"
    RELATIVE_STRENGTH = "relative_strength"
    SHORT_INTEREST = "short_interest"
    OPTIONS_FLOW = "options_flow"


class FundamentalsComponent(str, Enum):
    PROFITABILITY = "profitability"
    GROWTH = "growth"
    VALUATION = "valuation"
    FINANCIAL_STRENGTH = "financial_strength"
    EFFICIENCY = "efficiency"


class RegimeComponent(str, Enum):
    TREND = "trend"
    VOLATILITY = "volatility"
    BREADTH = "breadth"
    SENTIMENT = "sentiment"


class MarketRegime(str, Enum):
    """Broad market state detected from the benchmark series."""

    BULL = "bull"
    BEAR = "bear"
    SIDEWAYS = "sideways"
    VOLATILE = "volatile"
    STABLE = "stable"
    TRANSITION = "transition"


# ---------------------------------------------------------------------------
# Mapping constants
# ---------------------------------------------------------------------------

SIGNAL_ORDER: tuple[Signal, ...] = tuple(Signal)

SIGNAL_LABELS: dict[ScoringDomain, dict[Signal, str]] = {
    ScoringDomain.TIMING: {
        Signal.STRONG_BUY: "StrongBuy",
        Signal.BUY: "Buy",
        Signal.HOLD: "Neutral",
        Signal.SELL: "Sell",
        Signal.STRONG_SELL: "StrongSell",
    },
    ScoringDomain.SENTIMENT: {
        Signal.STRONG_BUY: "StrongBuy",
        Signal.BUY: "WeakBuy",
        Signal.HOLD: "Hold",
        Signal.SELL: "WeakSell",
        Signal.STRONG_SELL: "StrongSell",
    },
    ScoringDomain.FUNDAMENTALS: {
        Signal.STRONG_BUY: "StrongBuy",
        Signal.BUY: "WeakBuy",
        Signal.HOLD: "Hold",
        Signal.SELL: "WeakSell",
        Signal.STRONG_SELL: "StrongSell",
    },
    ScoringDomain.REGIME: {
        Signal.STRONG_BUY: "RiskOn",
        Signal.BUY: "Constructive",
        Signal.HOLD: "Neutral",
        Signal.SELL: "Defensive",
        Signal.STRONG_SELL: "RiskOff",
    },
}

POSITION_SIZES: dict[ScoringDomain, dict[Signal, float]] = {
    ScoringDomain.TIMING: {
        Signal.STRONG_BUY: 1.0,
        Signal.BUY: 0.5,
        Signal.HOLD: 0.0,
        Signal.SELL: -0.5,
        Signal.STRONG_SELL: -1.0,
    },
    ScoringDomain.SENTIMENT: {
        Signal.STRONG_BUY: 0.10,
        Signal.BUY: 0.05,
        Signal.HOLD: 0.0,
        Signal.SELL: -0.05,
        Signal.STRONG_SELL: -0.10,
    },
}

REGIME_MULTIPLIERS: dict[MarketRegime, float] = {
    MarketRegime.BULL: 1.2,
    MarketRegime.BEAR: 0.8,
    MarketRegime.SIDEWAYS: 1.0,
    MarketRegime.VOLATILE: 0.9,
    MarketRegime.STABLE: 1.1,
    MarketRegime.TRANSITION: 0.95,
}

# Confidence floor when every sub-score is missing.
CONFIDENCE_FLOORS: dict[ScoringDomain, float] = {
    ScoringDomain.SENTIMENT: 0.2,
    ScoringDomain.FUNDAMENTALS: 0.0,
    ScoringDomain.REGIME: 0.2,
}

# Price-vs-SMA weights for short, medium and long averages.
MA_ALIGNMENT_WEIGHTS: tuple[float, float, float] = (0.5, 0.3, 0.2)


# ---------------------------------------------------------------------------
# Frozen dataclass configs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SignalThresholds:
    """Inclusive lower bounds of the four upper signal bands.

    Parameters
    ----------
    strong_buy : float
        Scores ``>= strong_buy`` are STRONG_BUY.
    buy : float
        Scores in ``[buy, strong_buy)`` are BUY.
    hold : float
        Scores in ``[hold, buy)`` are HOLD.
    sell : float
        Scores in ``[sell, hold)`` are SELL; anything lower is STRONG_SELL.
    """

    strong_buy: float = 0.6
    buy: float = 0.2
    hold: float = -0.2
    sell: float = -0.6

    def __post_init__(self) -> None:
        bounds = (self.strong_buy, self.buy, self.hold, self.sell)
        if any(not -1.0 <= b <= 1.0 for b in bounds):
            raise ConfigurationError(f"thresholds must lie in [-1, 1], got {bounds}")
        if not self.strong_buy > self.buy > self.hold > self.sell:
            raise ConfigurationError(
                f"thresholds must be strictly decreasing, got {bounds}"
            )

    @classmethod
    def for_timing(cls) -> SignalThresholds:
        return cls()

    @classmethod
    def for_sentiment(cls) -> SignalThresholds:
        """Narrower strong bands than the other domains."""
        return cls(strong_buy=0.5, buy=0.2, hold=-0.2, sell=-0.5)

    @classmethod
    def for_fundamentals(cls) -> SignalThresholds:
        return cls()

    @classmethod
    def for_regime(cls) -> SignalThresholds:
        return cls()

    @classmethod
    def for_domain(cls, domain: ScoringDomain) -> SignalThresholds:
        factories = {
            ScoringDomain.TIMING: cls.for_timing,
            ScoringDomain.SENTIMENT: cls.for_sentiment,
            ScoringDomain.FUNDAMENTALS: cls.for_fundamentals,
            ScoringDomain.REGIME: cls.for_regime,
        }
        return factories[ScoringDomain(domain)]()


@dataclass(frozen=True)
class WeightVector:
    """Versioned, immutable mapping from sub-score name to weight.

    Changing any weight changes how new results compare with stored
    history, so every change must come with a new ``version``.

    Parameters
    ----------
    domain : ScoringDomain
        Domain the weights belong to.
    version : str
        Identifier persisted alongside every result.
    weights : Mapping[str, float]
        Non-negative weights summing to 1 (within 1e-9).
    """

    domain: ScoringDomain
    version: str
    weights: Mapping[str, float]

    def __post_init__(self) -> None:
        if any(w < 0 for w in self.weights.values()):
            raise ConfigurationError(f"{self.version}: weights must be non-negative")
        total = math.fsum(self.weights.values())
        if abs(total - 1.0) > 1e-9:
            raise ConfigurationError(
                f"{self.version}: weights must sum to 1.0, got {total!r}"
            )
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.weights)

    def __len__(self) -> int:
        return len(self.weights)


def _equal_weights(names: list[str]) -> dict[str, float]:
    return {name: 1.0 / len(names) for name in names}


TIMING_INDICATOR_WEIGHTS = WeightVector(
    domain=ScoringDomain.TIMING,
    version="timing-indicators-v1",
    weights=_equal_weights([c.value for c in TimingComponent]),
)

TIMING_WEIGHTS = WeightVector(
    domain=ScoringDomain.TIMING,
    version="timing-v1",
    weights={"indicators": 0.7, "trend": 0.3},
)

SENTIMENT_WEIGHTS = WeightVector(
    domain=ScoringDomain.SENTIMENT,
    version="sentiment-v1",
    weights={
        SentimentComponent.EARNINGS_REVISIONS.value: 0.4,
        SentimentComponent.RELATIVE_STRENGTH.value: 0.3,
        SentimentComponent.SHORT_INTEREST.value: 0.2,
        SentimentComponent.OPTIONS_FLOW.value: 0.1,
    },
)

FUNDAMENTALS_WEIGHTS = WeightVector(
    domain=ScoringDomain.FUNDAMENTALS,
    version="fundamentals-v1",
    weights={
        FundamentalsComponent.PROFITABILITY.value: 0.25,
        FundamentalsComponent.GROWTH.value: 0.25,
        FundamentalsComponent.VALUATION.value: 0.25,
        FundamentalsComponent.FINANCIAL_STRENGTH.value: 0.15,
        FundamentalsComponent.EFFICIENCY.value: 0.10,
    },
)

REGIME_WEIGHTS = WeightVector(
    domain=ScoringDomain.REGIME,
    version="regime-v1",
    weights={
        RegimeComponent.TREND.value: 0.4,
        RegimeComponent.VOLATILITY.value: 0.3,
        RegimeComponent.BREADTH.value: 0.2,
        RegimeComponent.SENTIMENT.value: 0.1,
    },
)

ALL_WEIGHT_VECTORS: tuple[WeightVector, ...] = (
    TIMING_INDICATOR_WEIGHTS,
    TIMING_WEIGHTS,
    SENTIMENT_WEIGHTS,
    FUNDAMENTALS_WEIGHTS,
    REGIME_WEIGHTS,
)
