"""Weighted composite of optional sub-scores."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Optional

from tradescore.scoring._components import clamp
from tradescore.scoring._config import WeightVector

SubScores = Mapping[str, Optional[float]]


def weighted_mean(sub_scores: SubScores, weights: WeightVector) -> float | None:
    """Weighted mean over the sub-scores that are present.

    Missing (``None``) sub-scores are skipped and the remaining weights
    are renormalized.  Returns ``None`` when nothing is present.
    """
    terms: list[float] = []
    used: list[float] = []
    for name, weight in weights.weights.items():
        value = sub_scores.get(name)
        if value is None or weight == 0:
            continue
        terms.append(weight * clamp(value))
        used.append(weight)
    if not used:
        return None
    return math.fsum(terms) / math.fsum(used)


def aggregate(sub_scores: SubScores, weights: WeightVector) -> float:
    """Composite score in [-1, 1]; 0.0 when no sub-score is present."""
    value = weighted_mean(sub_scores, weights)
    return 0.0 if value is None else clamp(value)


def count_present(sub_scores: SubScores, weights: WeightVector) -> int:
    """Number of weighted sub-scores that are present."""
    return sum(sub_scores.get(name) is not None for name in weights.names)
