"""Data-source and storage collaborators."""

from tradescore.providers._fmp import (
    FmpClient,
    FmpCompanyDataProvider,
    FmpFactProvider,
    FmpPriceProvider,
)
from tradescore.providers._memory import (
    InMemoryCompanyDataProvider,
    InMemoryFactProvider,
    InMemoryPriceProvider,
    InMemoryResultStore,
)
from tradescore.providers._protocols import (
    AssessmentStore,
    CompanyData,
    CompanyDataProvider,
    FactProvider,
    PriceSeriesProvider,
    ResultStore,
)
from tradescore.providers._rest_store import (
    DOMAIN_TABLES,
    SCREENING_TABLE,
    RestResultStore,
)

__all__ = [
    "DOMAIN_TABLES",
    "SCREENING_TABLE",
    "AssessmentStore",
    "CompanyData",
    "CompanyDataProvider",
    "FactProvider",
    "FmpClient",
    "FmpCompanyDataProvider",
    "FmpFactProvider",
    "FmpPriceProvider",
    "InMemoryCompanyDataProvider",
    "InMemoryFactProvider",
    "InMemoryPriceProvider",
    "InMemoryResultStore",
    "PriceSeriesProvider",
    "ResultStore",
    "RestResultStore",
]
