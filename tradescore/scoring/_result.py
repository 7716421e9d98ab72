"""Immutable outcome of one scoring run."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Optional

from tradescore.scoring._classify import signal_label
from tradescore.scoring._config import ScoringDomain, Signal


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CompositeResult:
    """One analysis of one symbol in one domain.

    Results form a time series: a re-analysis produces a new result and
    never overwrites an older one.

    Parameters
    ----------
    symbol : str
        Ticker the result describes.
    domain : ScoringDomain
        Scoring domain that produced it.
    composite_score : float
        Weighted composite in [-1, 1].
    signal : Signal
        Classification of ``composite_score``.
    confidence : float
        Data-completeness confidence in [0, 1].
    sub_scores : Mapping[str, float or None]
        Component scores; ``None`` marks a missing input.
    flags : frozenset[str]
        Warnings and notable conditions.
    computed_at : datetime
        Timezone-aware analysis time.
    weights_version : str
        Version of the weight vector used.
    details : Mapping[str, Any]
        JSON-safe supplemental analytics.
    """

    symbol: str
    domain: ScoringDomain
    composite_score: float
    signal: Signal
    confidence: float
    sub_scores: Mapping[str, Optional[float]]
    flags: frozenset[str] = frozenset()
    computed_at: datetime = field(default_factory=utc_now)
    weights_version: str = ""
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "domain", ScoringDomain(self.domain))
        object.__setattr__(self, "signal", Signal(self.signal))
        object.__setattr__(self, "flags", frozenset(self.flags))
        object.__setattr__(self, "sub_scores", MappingProxyType(dict(self.sub_scores)))
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))
        if self.computed_at.tzinfo is None:
            object.__setattr__(
                self, "computed_at", self.computed_at.replace(tzinfo=timezone.utc)
            )

    @property
    def label(self) -> str:
        return signal_label(self.domain, self.signal)

    @property
    def valid_sub_scores(self) -> int:
        return sum(v is not None for v in self.sub_scores.values())

    # -- serialization -------------------------------------------------------

    def to_record(self) -> dict[str, Any]:
        """Flat JSON-safe row as written to the result store."""
        return {
            "symbol": self.symbol,
            "domain": self.domain.value,
            "composite_score": self.composite_score,
            "signal": self.signal.value,
            "signal_label": self.label,
            "confidence": self.confidence,
            "sub_scores": dict(self.sub_scores),
            "flags": sorted(self.flags),
            "weights_version": self.weights_version,
            "details": dict(self.details),
            "computed_at": self.computed_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> CompositeResult:
        computed_at = record["computed_at"]
        if isinstance(computed_at, str):
            computed_at = datetime.fromisoformat(computed_at.replace("Z", "+00:00"))
        if computed_at.tzinfo is None:
            computed_at = computed_at.replace(tzinfo=timezone.utc)
        return cls(
            symbol=record["symbol"],
            domain=ScoringDomain(record["domain"]),
            composite_score=float(record["composite_score"]),
            signal=Signal(record["signal"]),
            confidence=float(record["confidence"]),
            sub_scores={
                k: None if v is None else float(v)
                for k, v in (record.get("sub_scores") or {}).items()
            },
            flags=frozenset(record.get("flags") or ()),
            computed_at=computed_at,
            weights_version=record.get("weights_version") or "",
            details=record.get("details") or {},
        )


def rank_results(
    results: Iterable[CompositeResult], n: int | None = None
) -> list[CompositeResult]:
    """Results ordered by composite score (highest first), ties by symbol."""
    ranked = sorted(results, key=lambda r: (-r.composite_score, r.symbol))
    return ranked if n is None else ranked[:n]
