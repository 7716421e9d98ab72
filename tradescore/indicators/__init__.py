"""Technical indicators and market-structure analytics over price series."""

from tradescore.indicators._averages import bollinger_bands, ema, macd, sma
from tradescore.indicators._config import (
    CORE_INDICATORS,
    TREND_DIRECTION_SCORES,
    IndicatorConfig,
    PriceVolumeRelationship,
    RiskLevel,
    TrendDirection,
    VolumeTrend,
)
from tradescore.indicators._engine import (
    SMA_KEYS,
    IndicatorSet,
    compute_indicators,
    count_core_indicators,
)
from tradescore.indicators._oscillators import rsi, stochastic, williams_r
from tradescore.indicators._structure import (
    MIN_STRUCTURE_BARS,
    RiskAssessment,
    SupportResistance,
    TrendAnalysis,
    VolumeAnalysis,
    analyze_trend,
    analyze_volume,
    assess_risk,
    classify_trend,
    max_drawdown_pct,
    period_change_pct,
    support_resistance,
)
from tradescore.indicators._volatility import atr, true_ranges, volume_ratio

__all__ = [
    "CORE_INDICATORS",
    "MIN_STRUCTURE_BARS",
    "SMA_KEYS",
    "TREND_DIRECTION_SCORES",
    "IndicatorConfig",
    "IndicatorSet",
    "PriceVolumeRelationship",
    "RiskAssessment",
    "RiskLevel",
    "SupportResistance",
    "TrendAnalysis",
    "TrendDirection",
    "VolumeAnalysis",
    "VolumeTrend",
    "analyze_trend",
    "analyze_volume",
    "assess_risk",
    "atr",
    "bollinger_bands",
    "classify_trend",
    "compute_indicators",
    "count_core_indicators",
    "ema",
    "macd",
    "max_drawdown_pct",
    "period_change_pct",
    "rsi",
    "sma",
    "stochastic",
    "support_resistance",
    "true_ranges",
    "volume_ratio",
    "williams_r",
]
