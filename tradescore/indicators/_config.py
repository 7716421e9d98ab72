"""Configuration for indicator computation and market-structure analytics."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tradescore.exceptions import ConfigurationError

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TrendDirection(str, Enum):
    """Direction of price movement over one horizon."""

    STRONG_BULLISH = "strong_bullish"
    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"
    STRONG_BEARISH = "strong_bearish"


class RiskLevel(str, Enum):
    """Volatility-driven risk bucket."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class VolumeTrend(str, Enum):
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class PriceVolumeRelationship(str, Enum):
    """How the latest price move is confirmed by volume."""

    BULLISH_CONFIRMATION = "bullish_confirmation"
    BEARISH_CONFIRMATION = "bearish_confirmation"
    WEAK_RALLY = "weak_rally"
    WEAK_DECLINE = "weak_decline"
    NEUTRAL = "neutral"


# ---------------------------------------------------------------------------
# Mapping constants
# ---------------------------------------------------------------------------

TREND_DIRECTION_SCORES: dict[TrendDirection, float] = {
    TrendDirection.STRONG_BULLISH: 1.0,
    TrendDirection.BULLISH: 0.5,
    TrendDirection.NEUTRAL: 0.0,
    TrendDirection.BEARISH: -0.5,
    TrendDirection.STRONG_BEARISH: -1.0,
}

# Indicators counted by the timing confidence estimate.
CORE_INDICATORS: tuple[str, ...] = (
    "rsi",
    "macd",
    "bollinger_middle",
    "sma_short",
    "stochastic_k",
    "williams_r",
    "atr",
)


# ---------------------------------------------------------------------------
# Frozen dataclass configs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IndicatorConfig:
    """Lookback windows for the indicator engine.

    Parameters
    ----------
    rsi_period : int
        Wilder RSI period.
    macd_fast, macd_slow : int
        EMA periods for MACD; ``macd_fast`` must be shorter.
    bollinger_period : int
        SMA window for the Bollinger middle band.
    bollinger_k : float
        Band width in standard deviations.
    stochastic_period : int
        High/low window for %K.
    williams_period : int
        High/low window for Williams %R.
    atr_period : int
        Number of true ranges averaged into ATR.
    atr_baseline_window : int
        Trailing window of true ranges forming the ATR baseline.
    sma_periods : tuple[int, int, int]
        Short, medium and long SMA windows used for trend alignment.
    volume_recent : int
        Bars in the recent volume average.
    volume_prior : int
        Bars in the prior volume average preceding the recent window.
    """

    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    bollinger_period: int = 20
    bollinger_k: float = 2.0
    stochastic_period: int = 14
    williams_period: int = 14
    atr_period: int = 14
    atr_baseline_window: int = 50
    sma_periods: tuple[int, int, int] = (20, 50, 200)
    volume_recent: int = 5
    volume_prior: int = 15

    def __post_init__(self) -> None:
        periods = (
            self.rsi_period,
            self.macd_fast,
            self.macd_slow,
            self.bollinger_period,
            self.stochastic_period,
            self.williams_period,
            self.atr_period,
            self.atr_baseline_window,
            self.volume_recent,
            self.volume_prior,
            *self.sma_periods,
        )
        if any(p < 1 for p in periods):
            raise ConfigurationError("indicator periods must be positive")
        if self.macd_fast >= self.macd_slow:
            raise ConfigurationError(
                f"macd_fast ({self.macd_fast}) must be below "
                f"macd_slow ({self.macd_slow})"
            )
        if len(self.sma_periods) != 3:
            raise ConfigurationError(
                f"sma_periods needs exactly 3 windows, got {self.sma_periods}"
            )
        if self.bollinger_k <= 0:
            raise ConfigurationError(
                f"bollinger_k must be positive, got {self.bollinger_k}"
            )

    @property
    def volume_window(self) -> int:
        """Bars required for the volume ratio."""
        return self.volume_recent + self.volume_prior

    @classmethod
    def for_short_history(cls) -> IndicatorConfig:
        """Shorter windows for series of roughly 60 bars or less."""
        return cls(sma_periods=(10, 20, 50), atr_baseline_window=30)
