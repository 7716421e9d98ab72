"""Price-series and fact data objects."""

from tradescore.data._bars import (
    Bar,
    PriceSeries,
    closes,
    highs,
    lows,
    validate_bars,
    volumes,
)
from tradescore.data._facts import FactName, FactSet, fact
from tradescore.data._frames import bars_from_frame, bars_to_frame
from tradescore.data._profile import (
    GROSS_PROFIT_MARGIN,
    NET_PROFIT_MARGIN,
    RETURN_ON_ASSETS,
    CompanyProfile,
    RatioSnapshot,
)

__all__ = [
    "GROSS_PROFIT_MARGIN",
    "NET_PROFIT_MARGIN",
    "RETURN_ON_ASSETS",
    "Bar",
    "CompanyProfile",
    "FactName",
    "FactSet",
    "PriceSeries",
    "RatioSnapshot",
    "bars_from_frame",
    "bars_to_frame",
    "closes",
    "fact",
    "highs",
    "lows",
    "validate_bars",
    "volumes",
]
