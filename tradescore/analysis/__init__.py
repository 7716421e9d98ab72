"""Domain analyzers joining data collaborators with the scoring engine."""

from tradescore.analysis._analyzers import (
    DEFAULT_FETCH_RETRY,
    DomainAnalyzer,
    FundamentalsAnalyzer,
    RegimeAnalyzer,
    SentimentAnalyzer,
    TimingAnalyzer,
    build_analyzer,
    fetch_optional,
)

__all__ = [
    "DEFAULT_FETCH_RETRY",
    "DomainAnalyzer",
    "FundamentalsAnalyzer",
    "RegimeAnalyzer",
    "SentimentAnalyzer",
    "TimingAnalyzer",
    "build_analyzer",
    "fetch_optional",
]
