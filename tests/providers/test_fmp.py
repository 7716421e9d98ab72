"""Tests for the FMP adapter using a mocked HTTP transport."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from tradescore.exceptions import (
    DataUnavailableError,
    InvalidResponseFormatError,
    MissingCredentialError,
    NotFoundError,
    RateLimitedError,
)
from tradescore.data import GROSS_PROFIT_MARGIN, NET_PROFIT_MARGIN, RETURN_ON_ASSETS
from tradescore.providers import (
    CompanyDataProvider,
    FmpClient,
    FmpCompanyDataProvider,
    FmpFactProvider,
    FmpPriceProvider,
)

BASE = "https://fmp.test/api/v3"

HISTORY = {
    "symbol": "AAPL",
    "historical": [
        {"date": "2024-01-04", "open": 11, "high": 12, "low": 10, "close": 11.5, "volume": 300},
        {"date": "2024-01-03", "open": 10, "high": 11, "low": 9, "close": 10.5, "volume": 200},
        {"date": "2024-01-02", "open": 9, "high": 10, "low": 8, "close": 9.5, "volume": 100},
    ],
}


def client_for(handler, api_key: str | None = "secret") -> FmpClient:
    transport = httpx.MockTransport(handler)
    http = httpx.AsyncClient(transport=transport, base_url=BASE)
    return FmpClient(api_key, client=http)


def respond(status: int = 200, payload=None, headers=None):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=payload, headers=headers)

    return handler


class TestPrices:
    def test_sorted_and_sliced(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=HISTORY)

        bars = asyncio.run(client_for(handler).fetch_prices("AAPL", 2))
        assert [b.close for b in bars] == [10.5, 11.5]
        assert bars[0].timestamp.tzinfo is not None
        assert seen[0].url.path.endswith("/historical-price-full/AAPL")
        assert seen[0].url.params["apikey"] == "secret"
        assert seen[0].url.params["timeseries"] == "2"

    def test_empty_object_is_not_found(self) -> None:
        with pytest.raises(NotFoundError):
            asyncio.run(client_for(respond(payload={})).fetch_prices("ZZZ", 10))

    def test_missing_history_is_invalid(self) -> None:
        with pytest.raises(InvalidResponseFormatError):
            asyncio.run(client_for(respond(payload=[1, 2])).fetch_prices("AAPL", 10))

    def test_bad_bar(self) -> None:
        payload = {"historical": [{"date": "2024-01-02", "open": "x"}]}
        with pytest.raises(InvalidResponseFormatError):
            asyncio.run(client_for(respond(payload=payload)).fetch_prices("AAPL", 10))

    def test_provider_adapter(self) -> None:
        provider = FmpPriceProvider(client_for(respond(payload=HISTORY)))
        assert len(asyncio.run(provider.fetch("AAPL", 10))) == 3


class TestErrorMapping:
    def test_missing_key_makes_no_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(MissingCredentialError) as excinfo:
            asyncio.run(client_for(handler, api_key=None).fetch_prices("AAPL", 10))
        assert excinfo.value.source == "fmp"
        assert not excinfo.value.retryable

    def test_rate_limited_with_retry_after(self) -> None:
        handler = respond(429, {"message": "slow down"}, headers={"Retry-After": "12"})
        with pytest.raises(RateLimitedError) as excinfo:
            asyncio.run(client_for(handler).fetch_prices("AAPL", 10))
        assert excinfo.value.retry_after == 12.0

    @pytest.mark.parametrize(
        ("status", "error"),
        [
            (401, MissingCredentialError),
            (403, MissingCredentialError),
            (404, NotFoundError),
            (500, DataUnavailableError),
            (503, DataUnavailableError),
            (400, InvalidResponseFormatError),
        ],
    )
    def test_status_codes(self, status: int, error: type[Exception]) -> None:
        with pytest.raises(error):
            asyncio.run(client_for(respond(status, {})).fetch_prices("AAPL", 10))

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(DataUnavailableError):
            asyncio.run(client_for(handler).fetch_prices("AAPL", 10))

    def test_non_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        with pytest.raises(InvalidResponseFormatError):
            asyncio.run(client_for(handler).fetch_prices("AAPL", 10))

    @pytest.mark.parametrize(
        ("message", "error"),
        [
            ("Limit Reach . Please upgrade your plan", RateLimitedError),
            ("Invalid API KEY.", MissingCredentialError),
            ("Something else", InvalidResponseFormatError),
        ],
    )
    def test_error_message_payload(self, message: str, error: type[Exception]) -> None:
        handler = respond(payload={"Error Message": message})
        with pytest.raises(error):
            asyncio.run(client_for(handler).fetch_prices("AAPL", 10))


def facts_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if "/ratios-ttm/" in path:
        return httpx.Response(200, json=[{"returnOnEquityTTM": 0.25, "priceEarningsRatioTTM": 28.0}])
    if "/financial-growth/" in path:
        return httpx.Response(200, json=[{"revenueGrowth": 0.08, "epsgrowth": None}])
    if "/analyst-estimates/" in path:
        return httpx.Response(200, json=[{"estimatedEpsAvg": 6.6}, {"estimatedEpsAvg": 6.0}])
    if "/grade/" in path:
        grades = [{"newGrade": "Buy"}, {"newGrade": "Hold"}, {"newGrade": "Outperform"}, {"newGrade": "Sell"}]
        return httpx.Response(200, json=grades)
    if "/quote/" in path:
        return httpx.Response(200, json=[{"price": 18.5}])
    return httpx.Response(404, json={})


class TestFacts:
    def test_fact_mapping(self) -> None:
        facts = asyncio.run(client_for(facts_handler).fetch_facts("AAPL"))
        assert facts["roe"] == 0.25
        assert facts["pe_ratio"] == 28.0
        assert facts["roa"] is None
        assert facts["revenue_growth"] == 0.08
        assert facts["eps_growth"] is None
        assert facts["eps_estimate_current"] == 6.6
        assert facts["eps_estimate_prior"] == 6.0
        assert facts["analyst_rating_score"] == pytest.approx(0.25)
        assert "vix" not in facts

    def test_market_facts(self) -> None:
        provider = FmpFactProvider(client_for(facts_handler), include_market=True)
        facts = asyncio.run(provider.fetch("SPY"))
        assert facts["vix"] == 18.5

    def test_missing_endpoints_give_absent_facts(self) -> None:
        facts = asyncio.run(client_for(respond(404, {})).fetch_facts("AAPL"))
        assert all(value is None for value in facts.values())

    def test_wrong_shape(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=json.dumps({"unexpected": True}))

        with pytest.raises(InvalidResponseFormatError):
            asyncio.run(client_for(handler).fetch_facts("AAPL"))


PROFILE_ROW = {
    "symbol": "AAPL",
    "companyName": "Apple Inc.",
    "sector": "Technology",
    "industry": "Consumer Electronics",
    "description": "Designs phones.",
    "mktCap": 3.0e12,
    "price": 190.5,
}


def routed(routes: dict[str, httpx.Response]):
    """Handler answering by URL path suffix, 404 for anything else."""

    def handler(request: httpx.Request) -> httpx.Response:
        for suffix, response in routes.items():
            if request.url.path.endswith(suffix):
                return response
        return httpx.Response(404, json={})

    return handler


class TestCompanyData:
    def test_sp500_constituents(self) -> None:
        payload = [
            {"symbol": "aapl", "name": "Apple Inc.", "sector": "Technology",
             "subSector": "Hardware"},
            {"symbol": "", "name": "Blank"},
            {"symbol": "MSFT", "name": "Microsoft", "sector": "", "industry": "Software"},
            "junk",
        ]
        members = asyncio.run(client_for(respond(payload=payload)).fetch_sp500_constituents())
        assert [m.symbol for m in members] == ["AAPL", "MSFT"]
        assert members[0].industry == "Hardware"
        assert members[1].sector is None

    def test_sp500_requires_list(self) -> None:
        with pytest.raises(InvalidResponseFormatError):
            asyncio.run(client_for(respond(payload={"x": 1})).fetch_sp500_constituents())

    def test_profile(self) -> None:
        profile = asyncio.run(client_for(respond(payload=[PROFILE_ROW])).fetch_profile("AAPL"))
        assert profile.name == "Apple Inc."
        assert profile.market_cap == 3_000_000_000_000
        assert profile.price == 190.5
        assert profile.is_classified

    def test_empty_profile_is_not_found(self) -> None:
        with pytest.raises(NotFoundError):
            asyncio.run(client_for(respond(payload=[])).fetch_profile("ZZZ"))

    def test_ratios(self) -> None:
        row = {"grossProfitMargin": 0.44, "netProfitMargin": "0.25", "returnOnAssets": None}
        ratios = asyncio.run(client_for(respond(payload=[row])).fetch_ratios("AAPL"))
        assert ratios == {
            GROSS_PROFIT_MARGIN: 0.44,
            NET_PROFIT_MARGIN: 0.25,
            RETURN_ON_ASSETS: None,
        }

    def test_no_ratios(self) -> None:
        assert asyncio.run(client_for(respond(payload=[])).fetch_ratios("AAPL")) is None
        assert asyncio.run(client_for(respond(404, payload={})).fetch_ratios("AAPL")) is None

    def test_provider_without_prices(self) -> None:
        handler = routed({
            "/profile/AAPL": httpx.Response(200, json=[PROFILE_ROW]),
            "/ratios/AAPL": httpx.Response(200, json=[{"grossProfitMargin": 0.4}]),
        })
        provider = FmpCompanyDataProvider(client_for(handler))
        assert isinstance(provider, CompanyDataProvider)
        profile, ratios, bars = asyncio.run(provider.fetch("AAPL"))
        assert profile.symbol == "AAPL"
        assert ratios[GROSS_PROFIT_MARGIN] == 0.4
        assert bars == []

    def test_provider_with_prices(self) -> None:
        handler = routed({
            "/profile/AAPL": httpx.Response(200, json=[PROFILE_ROW]),
            "/ratios/AAPL": httpx.Response(200, json=[]),
            "/historical-price-full/AAPL": httpx.Response(200, json=HISTORY),
        })
        _, ratios, bars = asyncio.run(FmpCompanyDataProvider(client_for(handler)).fetch("AAPL"))
        assert ratios is None
        assert len(bars) == 3
