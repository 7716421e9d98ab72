"""Component scoring, weighted composites, signal classification and confidence."""

from tradescore.scoring._aggregate import (
    SubScores,
    aggregate,
    count_present,
    weighted_mean,
)
from tradescore.scoring._classify import classify, signal_label
from tradescore.scoring._components import (
    clamp,
    linear_score,
    mean_present,
    ratio_change,
    score_atr,
    score_bollinger,
    score_macd,
    score_moving_averages,
    score_oscillator,
    score_rsi,
    score_stochastic,
    score_volume,
    score_williams_r,
)
from tradescore.scoring._confidence import (
    FULL_WINDOW_BARS,
    completeness_confidence,
    timing_confidence,
)
from tradescore.scoring._config import (
    ALL_WEIGHT_VECTORS,
    CONFIDENCE_FLOORS,
    FUNDAMENTALS_WEIGHTS,
    MA_ALIGNMENT_WEIGHTS,
    POSITION_SIZES,
    REGIME_MULTIPLIERS,
    REGIME_WEIGHTS,
    SENTIMENT_WEIGHTS,
    SIGNAL_LABELS,
    SIGNAL_ORDER,
    TIMING_INDICATOR_WEIGHTS,
    TIMING_WEIGHTS,
    FundamentalsComponent,
    MarketRegime,
    RegimeComponent,
    ScoringDomain,
    SentimentComponent,
    Signal,
    SignalThresholds,
    TimingComponent,
    WeightVector,
)
from tradescore.scoring._fundamentals import (
    FUNDAMENTAL_RULES,
    MetricRule,
    fundamentals_sub_scores,
    metric_scores,
    score_fundamentals,
)
from tradescore.scoring._regime import (
    RegimeState,
    detect_regime,
    regime_state,
    regime_sub_scores,
    score_regime,
)
from tradescore.scoring._result import CompositeResult, rank_results, utc_now
from tradescore.scoring._sentiment import (
    relative_strength_score,
    score_sentiment,
    sentiment_composite,
    sentiment_sub_scores,
)
from tradescore.scoring._timing import (
    score_timing,
    timing_composite,
    timing_sub_scores,
)

__all__ = [
    "ALL_WEIGHT_VECTORS",
    "CONFIDENCE_FLOORS",
    "FULL_WINDOW_BARS",
    "FUNDAMENTALS_WEIGHTS",
    "FUNDAMENTAL_RULES",
    "MA_ALIGNMENT_WEIGHTS",
    "POSITION_SIZES",
    "REGIME_MULTIPLIERS",
    "REGIME_WEIGHTS",
    "SENTIMENT_WEIGHTS",
    "SIGNAL_LABELS",
    "SIGNAL_ORDER",
    "TIMING_INDICATOR_WEIGHTS",
    "TIMING_WEIGHTS",
    "CompositeResult",
    "FundamentalsComponent",
    "MarketRegime",
    "MetricRule",
    "RegimeComponent",
    "RegimeState",
    "ScoringDomain",
    "SentimentComponent",
    "Signal",
    "SignalThresholds",
    "SubScores",
    "TimingComponent",
    "WeightVector",
    "aggregate",
    "clamp",
    "classify",
    "completeness_confidence",
    "count_present",
    "detect_regime",
    "fundamentals_sub_scores",
    "linear_score",
    "mean_present",
    "metric_scores",
    "rank_results",
    "ratio_change",
    "regime_state",
    "regime_sub_scores",
    "relative_strength_score",
    "score_atr",
    "score_bollinger",
    "score_fundamentals",
    "score_macd",
    "score_moving_averages",
    "score_oscillator",
    "score_regime",
    "score_rsi",
    "score_sentiment",
    "score_stochastic",
    "score_timing",
    "score_volume",
    "score_williams_r",
    "sentiment_composite",
    "sentiment_sub_scores",
    "signal_label",
    "timing_composite",
    "timing_confidence",
    "timing_sub_scores",
    "utc_now",
    "weighted_mean",
]
