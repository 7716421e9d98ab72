"""In-process collaborators for dry runs and tests."""

from __future__ import annotations

import itertools
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Optional

from tradescore.data import Bar, CompanyProfile, FactSet, RatioSnapshot
from tradescore.exceptions import NotFoundError
from tradescore.scoring import CompositeResult, ScoringDomain

if TYPE_CHECKING:
    from tradescore.providers._protocols import CompanyData
    from tradescore.screening import SafetyAssessment


class InMemoryPriceProvider:
    """Serve fixed bar series keyed by symbol."""

    source = "memory"

    def __init__(self, series: Mapping[str, Sequence[Bar]]) -> None:
        self._series = dict(series)

    async def fetch(self, symbol: str, lookback_days: int) -> list[Bar]:
        try:
            bars = self._series[symbol]
        except KeyError:
            raise NotFoundError(self.source, f"no price data for {symbol}") from None
        return list(bars[-lookback_days:]) if lookback_days > 0 else []


class InMemoryFactProvider:
    """Serve fixed fact sets keyed by symbol; unknown symbols have no facts."""

    def __init__(self, facts: Mapping[str, FactSet]) -> None:
        self._facts = {symbol: dict(values) for symbol, values in facts.items()}

    async def fetch(self, symbol: str) -> FactSet:
        return dict(self._facts.get(symbol, {}))


class InMemoryCompanyDataProvider:
    """Serve fixed profiles, ratios and bars keyed by symbol."""

    source = "memory"

    def __init__(
        self,
        profiles: Mapping[str, CompanyProfile],
        ratios: Mapping[str, RatioSnapshot] | None = None,
        series: Mapping[str, Sequence[Bar]] | None = None,
    ) -> None:
        self._profiles = dict(profiles)
        self._ratios = dict(ratios or {})
        self._series = dict(series or {})

    async def fetch(self, symbol: str) -> CompanyData:
        try:
            profile = self._profiles[symbol]
        except KeyError:
            raise NotFoundError(self.source, f"no profile for {symbol}") from None
        ratios: Optional[RatioSnapshot] = self._ratios.get(symbol)
        return profile, ratios, list(self._series.get(symbol, ()))


class InMemoryResultStore:
    """List-backed result store with sequential string ids."""

    def __init__(self, results: Sequence[CompositeResult] = ()) -> None:
        self._ids = itertools.count(1)
        self._rows: list[tuple[str, CompositeResult]] = []
        self.assessments: list[SafetyAssessment] = []
        for result in results:
            self._rows.append((str(next(self._ids)), result))

    def __len__(self) -> int:
        return len(self._rows)

    def results(self, domain: ScoringDomain | None = None) -> list[CompositeResult]:
        return [r for _, r in self._rows if domain is None or r.domain == domain]

    async def get_latest(
        self, symbol: str, domain: ScoringDomain
    ) -> CompositeResult | None:
        matches = [
            r for _, r in self._rows if r.symbol == symbol and r.domain == domain
        ]
        if not matches:
            return None
        return max(matches, key=lambda r: r.computed_at)

    async def insert(self, result: CompositeResult) -> str:
        row_id = str(next(self._ids))
        self._rows.append((row_id, result))
        return row_id

    async def insert_batch(self, results: Sequence[CompositeResult]) -> list[str]:
        return [await self.insert(result) for result in results]

    async def insert_assessments(
        self, assessments: Sequence[SafetyAssessment]
    ) -> list[str]:
        self.assessments.extend(assessments)
        return [str(next(self._ids)) for _ in assessments]
