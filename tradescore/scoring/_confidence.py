"""Confidence estimates from data completeness."""

from __future__ import annotations

from tradescore.scoring._components import clamp

# Bars needed for full data-window credit in timing confidence.
FULL_WINDOW_BARS = 50


def completeness_confidence(valid: int, total: int, floor: float = 0.0) -> float:
    """``floor + (1 - floor) * valid / total``, clamped to [0, 1].

    With a floor of 0.2 and four sub-scores this yields the steps
    0.2, 0.4, 0.6, 0.8 and 1.0.
    """
    if total <= 0:
        return clamp(floor, 0.0, 1.0)
    fraction = min(max(valid, 0), total) / total
    return clamp(floor + (1.0 - floor) * fraction, 0.0, 1.0)


def timing_confidence(bar_count: int, core_available: int, core_total: int = 7) -> float:
    """Blend of data window (30%), indicator availability (40%) and a fixed 0.3.

    The last term stands in for data recency, which the caller asserts
    rather than this estimate measuring it.
    """
    window = min(max(bar_count, 0) / FULL_WINDOW_BARS, 1.0)
    availability = min(max(core_available, 0), core_total) / core_total if core_total else 0.0
    return clamp(0.3 * window + 0.4 * availability + 0.3, 0.0, 1.0)
