"""Map composite scores to discrete signals."""

from __future__ import annotations

from tradescore.scoring._config import (
    SIGNAL_LABELS,
    ScoringDomain,
    Signal,
    SignalThresholds,
)


def classify(score: float, thresholds: SignalThresholds | None = None) -> Signal:
    """Classify *score* with inclusive lower bounds.

    ``score == thresholds.strong_buy`` is STRONG_BUY, not BUY; the same
    holds at every boundary.
    """
    if thresholds is None:
        thresholds = SignalThresholds()
    if score >= thresholds.strong_buy:
        return Signal.STRONG_BUY
    if score >= thresholds.buy:
        return Signal.BUY
    if score >= thresholds.hold:
        return Signal.HOLD
    if score >= thresholds.sell:
        return Signal.SELL
    return Signal.STRONG_SELL


def signal_label(domain: ScoringDomain, signal: Signal) -> str:
    """Domain-specific display name, e.g. ``"WeakBuy"`` for sentiment BUY."""
    return SIGNAL_LABELS[ScoringDomain(domain)][Signal(signal)]
