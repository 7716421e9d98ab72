"""
Collaborator protocols.

The scoring engine and batch orchestrator depend only on these
interfaces, so data sources and storage can be swapped without touching
business logic.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

from tradescore.data import Bar, CompanyProfile, FactSet, RatioSnapshot
from tradescore.scoring import CompositeResult, ScoringDomain

if TYPE_CHECKING:
    from tradescore.screening import SafetyAssessment

# Profile, latest ratios (None when none are reported) and daily bars.
CompanyData = tuple[CompanyProfile, Optional[RatioSnapshot], list[Bar]]


@runtime_checkable
class PriceSeriesProvider(Protocol):
    """Source of daily OHLCV bars."""

    async def fetch(self, symbol: str, lookback_days: int) -> list[Bar]:
        """
        Fetch up to *lookback_days* bars, oldest first.

        Fewer bars than requested is not an error.

        Raises:
            NotFoundError, RateLimitedError, DataUnavailableError,
            InvalidResponseFormatError, MissingCredentialError
        """
        ...


@runtime_checkable
class FactProvider(Protocol):
    """Source of named fundamental, earnings and market facts."""

    async def fetch(self, symbol: str) -> FactSet:
        """Fetch facts for *symbol*; every fact is optional."""
        ...


@runtime_checkable
class ResultStore(Protocol):
    """
    Time-series storage for composite results.

    Implementations must make every insert atomic and independent;
    duplicates for the same symbol are allowed.
    """

    async def get_latest(
        self, symbol: str, domain: ScoringDomain
    ) -> CompositeResult | None:
        """Most recent result for *symbol* in *domain*, or None."""
        ...

    async def insert(self, result: CompositeResult) -> str:
        """Store *result* and return its id."""
        ...

    async def insert_batch(self, results: Sequence[CompositeResult]) -> list[str]:
        """Store *results* and return their ids in order."""
        ...


@runtime_checkable
class CompanyDataProvider(Protocol):
    """Source of the descriptive, ratio and price data of one company."""

    async def fetch(self, symbol: str) -> CompanyData:
        """
        Fetch profile, latest ratios and recent daily bars for *symbol*.

        Raises:
            NotFoundError when the symbol is unknown, or any other
            data-source error.
        """
        ...


@runtime_checkable
class AssessmentStore(Protocol):
    """Append-only history of safety assessments."""

    async def insert_assessments(
        self, assessments: Sequence[SafetyAssessment]
    ) -> list[str]:
        """Store *assessments* and return their ids in order."""
        ...
