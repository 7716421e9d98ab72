"""Financial Modeling Prep HTTP adapter for prices and facts."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import httpx

from tradescore.data import (
    GROSS_PROFIT_MARGIN,
    NET_PROFIT_MARGIN,
    RETURN_ON_ASSETS,
    Bar,
    CompanyProfile,
    FactName,
    FactSet,
    RatioSnapshot,
)
from tradescore.exceptions import (
    DataUnavailableError,
    InvalidResponseFormatError,
    MissingCredentialError,
    NotFoundError,
    RateLimitedError,
)

if TYPE_CHECKING:
    from tradescore.config import Settings
    from tradescore.providers._protocols import CompanyData

logger = logging.getLogger(__name__)

SOURCE = "fmp"
CREDENTIAL = "FMP_API_KEY"

_RATIO_FIELDS: dict[FactName, str] = {
    FactName.ROE: "returnOnEquityTTM",
    FactName.ROA: "returnOnAssetsTTM",
    FactName.NET_PROFIT_MARGIN: "netProfitMarginTTM",
    FactName.PE_RATIO: "priceEarningsRatioTTM",
    FactName.PB_RATIO: "priceToBookRatioTTM",
    FactName.PEG_RATIO: "pegRatioTTM",
    FactName.DEBT_TO_EQUITY: "debtEquityRatioTTM",
    FactName.CURRENT_RATIO: "currentRatioTTM",
    FactName.INTEREST_COVERAGE: "interestCoverageTTM",
    FactName.ASSET_TURNOVER: "assetTurnoverTTM",
    FactName.INVENTORY_TURNOVER: "inventoryTurnoverTTM",
}

_GROWTH_FIELDS: dict[FactName, str] = {
    FactName.REVENUE_GROWTH: "revenueGrowth",
    FactName.EPS_GROWTH: "epsgrowth",
}

_GRADE_SCORES: dict[str, float] = {
    "strong buy": 1.0,
    "buy": 1.0,
    "outperform": 1.0,
    "overweight": 1.0,
    "hold": 0.0,
    "neutral": 0.0,
    "equal-weight": 0.0,
    "market perform": 0.0,
    "sector perform": 0.0,
    "underperform": -1.0,
    "underweight": -1.0,
    "sell": -1.0,
    "strong sell": -1.0,
}

_SAFETY_RATIO_FIELDS: dict[str, str] = {
    GROSS_PROFIT_MARGIN: "grossProfitMargin",
    NET_PROFIT_MARGIN: "netProfitMargin",
    RETURN_ON_ASSETS: "returnOnAssets",
}

# Grades averaged into the analyst rating score.
MAX_GRADES = 5


def _number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _first_row(payload: Any, path: str) -> dict[str, Any] | None:
    if payload is None:
        return None
    if not isinstance(payload, list):
        raise InvalidResponseFormatError(SOURCE, f"{path}: expected a list")
    if not payload:
        return None
    if not isinstance(payload[0], dict):
        raise InvalidResponseFormatError(SOURCE, f"{path}: expected objects")
    return payload[0]


def _text(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def _retry_after(response: httpx.Response) -> float | None:
    return _number(response.headers.get("Retry-After"))


class FmpClient:
    """Async adapter over the FMP REST API.

    All HTTP interaction is isolated here; callers receive bars, fact
    mappings or one of the :mod:`tradescore.exceptions` data-source errors.
    """

    BASE_URL = "https://financialmodelingprep.com/api/v3"

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout, connect=10.0),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> FmpClient:
        return cls(
            settings.fmp_api_key,
            base_url=settings.fmp_base_url,
            timeout=settings.http_timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> FmpClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get(self, path: str, **params: Any) -> Any:
        """GET *path* and return parsed JSON, mapping failures to data-source errors."""
        if not self._api_key:
            raise MissingCredentialError(SOURCE, CREDENTIAL)
        query = {k: v for k, v in params.items() if v is not None}
        query["apikey"] = self._api_key
        try:
            resp = await self._client.get(path, params=query)
        except httpx.HTTPError as exc:
            raise DataUnavailableError(SOURCE, f"{path}: {exc}") from exc

        if resp.status_code == 429:
            raise RateLimitedError(SOURCE, retry_after=_retry_after(resp))
        if resp.status_code in (401, 403):
            raise MissingCredentialError(SOURCE, f"{CREDENTIAL} (rejected)")
        if resp.status_code == 404:
            raise NotFoundError(SOURCE, f"{path}: not found")
        if resp.status_code >= 500:
            raise DataUnavailableError(SOURCE, f"{path}: HTTP {resp.status_code}")
        if resp.status_code >= 400:
            raise InvalidResponseFormatError(
                SOURCE, f"{path}: HTTP {resp.status_code}: {resp.text[:200]}"
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise InvalidResponseFormatError(SOURCE, f"{path}: body is not JSON") from exc

        if isinstance(payload, dict) and "Error Message" in payload:
            message = str(payload["Error Message"])
            lowered = message.lower()
            if "limit reach" in lowered:
                raise RateLimitedError(SOURCE, message)
            if "api key" in lowered:
                raise MissingCredentialError(SOURCE, f"{CREDENTIAL} (rejected)")
            raise InvalidResponseFormatError(SOURCE, f"{path}: {message}")
        return payload

    async def _get_optional(self, path: str, **params: Any) -> Any:
        try:
            return await self._get(path, **params)
        except NotFoundError:
            return None

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    async def fetch_prices(self, symbol: str, lookback_days: int) -> list[Bar]:
        """Daily bars, oldest first, at most *lookback_days* of them."""
        path = f"/historical-price-full/{symbol}"
        payload = await self._get(path, timeseries=lookback_days)

        if isinstance(payload, dict) and not payload:
            raise NotFoundError(SOURCE, f"no price history for {symbol}")
        if not isinstance(payload, dict) or not isinstance(payload.get("historical"), list):
            raise InvalidResponseFormatError(SOURCE, f"{path}: missing 'historical' list")

        try:
            bars = [
                Bar(
                    timestamp=datetime.fromisoformat(row["date"]).replace(
                        tzinfo=timezone.utc
                    ),
                    open=float(row["open"]),
                    high=float(row["high"]),
                    low=float(row["low"]),
                    close=float(row["close"]),
                    volume=int(row.get("volume") or 0),
                )
                for row in payload["historical"]
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidResponseFormatError(SOURCE, f"{path}: bad bar: {exc}") from exc

        if not bars:
            raise NotFoundError(SOURCE, f"no price history for {symbol}")
        bars.sort(key=lambda b: b.timestamp)
        logger.debug("Fetched %d bars for %s", len(bars), symbol)
        return bars[-lookback_days:]

    # ------------------------------------------------------------------
    # Facts
    # ------------------------------------------------------------------

    async def fetch_facts(self, symbol: str, *, include_market: bool = False) -> FactSet:
        """Fundamental, earnings and analyst facts for *symbol*.

        Endpoints answering 404 contribute no facts.  With
        *include_market* the VIX level is added as well.
        """
        requests = [
            self._get_optional(f"/ratios-ttm/{symbol}"),
            self._get_optional(f"/financial-growth/{symbol}", limit=1),
            self._get_optional(f"/analyst-estimates/{symbol}", limit=2),
            self._get_optional(f"/grade/{symbol}", limit=MAX_GRADES),
        ]
        if include_market:
            requests.append(self._get_optional("/quote/^VIX"))
        payloads = await asyncio.gather(*requests)
        ratios, growth, estimates, grades = payloads[:4]

        facts: dict[str, float | None] = {}

        row = _first_row(ratios, "ratios-ttm")
        for name, field_name in _RATIO_FIELDS.items():
            facts[name.value] = _number(row.get(field_name)) if row else None

        row = _first_row(growth, "financial-growth")
        for name, field_name in _GROWTH_FIELDS.items():
            facts[name.value] = _number(row.get(field_name)) if row else None

        if estimates is not None and not isinstance(estimates, list):
            raise InvalidResponseFormatError(SOURCE, "analyst-estimates: expected a list")
        estimates = [r for r in (estimates or []) if isinstance(r, dict)]
        facts[FactName.EPS_ESTIMATE_CURRENT.value] = (
            _number(estimates[0].get("estimatedEpsAvg")) if len(estimates) > 0 else None
        )
        facts[FactName.EPS_ESTIMATE_PRIOR.value] = (
            _number(estimates[1].get("estimatedEpsAvg")) if len(estimates) > 1 else None
        )

        facts[FactName.ANALYST_RATING_SCORE.value] = self._grade_score(grades)

        if include_market:
            quote = _first_row(payloads[4], "quote")
            facts[FactName.VIX.value] = _number(quote.get("price")) if quote else None

        return facts

    # ------------------------------------------------------------------
    # Company data
    # ------------------------------------------------------------------

    async def fetch_sp500_constituents(self) -> list[CompanyProfile]:
        """Current S&P 500 members; rows without a symbol are dropped."""
        payload = await self._get("/sp500_constituent")
        if not isinstance(payload, list):
            raise InvalidResponseFormatError(SOURCE, "sp500_constituent: expected a list")
        members = []
        for row in payload:
            if not isinstance(row, dict):
                continue
            symbol = _text(row.get("symbol"))
            if symbol is None:
                continue
            cap = _number(row.get("marketCap"))
            members.append(
                CompanyProfile(
                    symbol=symbol.upper(),
                    name=_text(row.get("name")) or "",
                    sector=_text(row.get("sector")),
                    industry=_text(row.get("industry")) or _text(row.get("subSector")),
                    market_cap=int(cap) if cap is not None else None,
                    price=_number(row.get("price")),
                )
            )
        logger.info("Fetched %d S&P 500 constituents", len(members))
        return members

    async def fetch_profile(self, symbol: str) -> CompanyProfile:
        row = _first_row(await self._get_optional(f"/profile/{symbol}"), "profile")
        if row is None:
            raise NotFoundError(SOURCE, f"no profile for {symbol}")
        cap = _number(row.get("mktCap"))
        return CompanyProfile(
            symbol=symbol,
            name=_text(row.get("companyName")) or "",
            sector=_text(row.get("sector")),
            industry=_text(row.get("industry")),
            description=_text(row.get("description")),
            market_cap=int(cap) if cap is not None else None,
            price=_number(row.get("price")),
        )

    async def fetch_ratios(self, symbol: str) -> RatioSnapshot | None:
        """Latest annual ratios, or None when the company reports none."""
        payload = await self._get_optional(f"/ratios/{symbol}", limit=1)
        row = _first_row(payload, "ratios")
        if row is None:
            return None
        return {name: _number(row.get(key)) for name, key in _SAFETY_RATIO_FIELDS.items()}

    @staticmethod
    def _grade_score(payload: Any) -> float | None:
        if payload is None:
            return None
        if not isinstance(payload, list):
            raise InvalidResponseFormatError(SOURCE, "grade: expected a list")
        scores = []
        for row in payload[:MAX_GRADES]:
            if not isinstance(row, dict):
                continue
            grade = str(row.get("newGrade", "")).strip().lower()
            if grade in _GRADE_SCORES:
                scores.append(_GRADE_SCORES[grade])
        if not scores:
            return None
        return sum(scores) / len(scores)


class FmpPriceProvider:
    """:class:`PriceSeriesProvider` backed by :class:`FmpClient`."""

    def __init__(self, client: FmpClient) -> None:
        self._client = client

    async def fetch(self, symbol: str, lookback_days: int) -> list[Bar]:
        return await self._client.fetch_prices(symbol, lookback_days)


class FmpFactProvider:
    """:class:`FactProvider` backed by :class:`FmpClient`."""

    def __init__(self, client: FmpClient, *, include_market: bool = False) -> None:
        self._client = client
        self._include_market = include_market

    async def fetch(self, symbol: str) -> FactSet:
        return await self._client.fetch_facts(symbol, include_market=self._include_market)


class FmpCompanyDataProvider:
    """:class:`CompanyDataProvider` backed by :class:`FmpClient`.

    A symbol without price history still yields data, with no bars.
    """

    def __init__(self, client: FmpClient, *, lookback_days: int = 60) -> None:
        self._client = client
        self._lookback_days = lookback_days

    async def _bars(self, symbol: str) -> list[Bar]:
        try:
            return await self._client.fetch_prices(symbol, self._lookback_days)
        except NotFoundError:
            logger.info("No price history for %s", symbol)
            return []

    async def fetch(self, symbol: str) -> CompanyData:
        profile = await self._client.fetch_profile(symbol)
        ratios, bars = await asyncio.gather(
            self._client.fetch_ratios(symbol), self._bars(symbol)
        )
        return profile, ratios, bars
