"""Company descriptive data used by the safety screen."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

# Ratio snapshot keyed by the names below; ``None`` marks a missing field.
RatioSnapshot = Mapping[str, Optional[float]]

GROSS_PROFIT_MARGIN = "gross_profit_margin"
NET_PROFIT_MARGIN = "net_profit_margin"
RETURN_ON_ASSETS = "return_on_assets"


@dataclass(frozen=True)
class CompanyProfile:
    """Identity and descriptive fields of one listed company.

    Parameters
    ----------
    symbol : str
        Ticker symbol.
    name : str
        Company name; empty when unknown.
    sector, industry, description : str or None
        Classification and business description as reported by the source.
    market_cap : int or None
        Market capitalization in USD.
    price : float or None
        Latest quoted price.
    """

    symbol: str
    name: str = ""
    sector: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    market_cap: Optional[int] = None
    price: Optional[float] = None

    @property
    def is_classified(self) -> bool:
        return self.sector is not None and self.industry is not None
