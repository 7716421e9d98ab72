"""Tests for the concurrent safety screener."""

from __future__ import annotations

import asyncio

import pytest

from cli.services import read_symbols
from tradescore.batch import RetryPolicy
from tradescore.data import GROSS_PROFIT_MARGIN, CompanyProfile
from tradescore.exceptions import ConfigurationError, DataUnavailableError
from tradescore.providers import InMemoryCompanyDataProvider
from tradescore.screening import SafetyScreener, ScreeningReport

RATIOS = {GROSS_PROFIT_MARGIN: 0.3}
NO_RETRY_DELAY = RetryPolicy.linear(2, 0.0)


def profile(symbol: str, described: bool = True) -> CompanyProfile:
    return CompanyProfile(
        symbol=symbol,
        name=f"{symbol} Corp",
        sector="Industrials",
        industry="Machinery",
        description="Makes machines." if described else None,
    )


@pytest.fixture()
def source(make_bars) -> InMemoryCompanyDataProvider:
    flat = make_bars([50.0] * 40)
    choppy = make_bars([40.0 if i % 2 else 60.0 for i in range(40)])
    return InMemoryCompanyDataProvider(
        profiles={
            "SAFE": profile("SAFE"),
            "CHOP": profile("CHOP"),
            "LOSS": profile("LOSS"),
            "THIN": profile("THIN", described=False),
        },
        ratios={"SAFE": RATIOS, "CHOP": RATIOS, "THIN": RATIOS},
        series={"SAFE": flat, "CHOP": choppy, "LOSS": flat, "THIN": flat[:5]},
    )


class FlakySource:
    """Source that fails a fixed number of times before delegating."""

    def __init__(self, inner, failures: int = 1, pause: float = 0.0) -> None:
        self.inner = inner
        self.failures = failures
        self.pause = pause
        self.calls = 0
        self.active = 0
        self.peak = 0

    async def fetch(self, symbol: str):
        self.calls += 1
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.pause)
            if self.calls <= self.failures:
                raise DataUnavailableError("test", "flaky")
            return await self.inner.fetch(symbol)
        finally:
            self.active -= 1


def screen(screener: SafetyScreener, symbols) -> ScreeningReport:
    return asyncio.run(screener.screen(symbols))


class TestSafetyScreener:
    def test_mixed_universe(self, source) -> None:
        report = screen(
            SafetyScreener(source, retry=NO_RETRY_DELAY),
            ["SAFE", "CHOP", "LOSS", "THIN", "NOPE"],
        )
        assert report.total == 5
        assert len(report.assessments) == 4
        assert report.safe_symbols == ["SAFE", "CHOP"]
        assert [f.symbol for f in report.failures] == ["NOPE"]
        assert report.failures[0].error.startswith("NotFoundError")
        assert report.failures[0].attempts == 1

    def test_transient_failure_is_retried(self, source) -> None:
        flaky = FlakySource(source, failures=2)
        report = screen(SafetyScreener(flaky, retry=NO_RETRY_DELAY), ["SAFE"])
        assert report.safe_symbols == ["SAFE"]
        assert flaky.calls == 3

    def test_retries_exhausted(self, source) -> None:
        flaky = FlakySource(source, failures=10)
        report = screen(SafetyScreener(flaky, retry=NO_RETRY_DELAY), ["SAFE"])
        assert report.assessments == ()
        assert report.failures[0].attempts == 3

    def test_concurrency_is_bounded(self, source) -> None:
        flaky = FlakySource(source, failures=0, pause=0.01)
        screen(
            SafetyScreener(flaky, max_concurrent=2, retry=NO_RETRY_DELAY),
            ["SAFE", "CHOP", "LOSS", "THIN"] * 2,
        )
        assert flaky.peak == 2
        assert flaky.calls == 4

    def test_failing_callback_is_contained(self, source) -> None:
        def on_assessed(symbol: str) -> None:
            raise RuntimeError("display gone")

        report = screen(
            SafetyScreener(source, retry=NO_RETRY_DELAY, on_assessed=on_assessed),
            ["SAFE", "CHOP"],
        )
        assert len(report.assessments) == 2

    def test_invalid_worker_count(self, source) -> None:
        with pytest.raises(ConfigurationError):
            SafetyScreener(source, max_concurrent=0)


class TestScreeningReport:
    def test_symbol_file_feeds_batch_runs(self, source, tmp_path) -> None:
        report = screen(
            SafetyScreener(source, retry=NO_RETRY_DELAY), ["CHOP", "SAFE", "LOSS"]
        )
        path = tmp_path / "universe.txt"
        assert report.write_symbols(path) == 2
        assert path.read_text().startswith("# 2 of 3")
        assert read_symbols(None, str(path)) == ["SAFE", "CHOP"]

    def test_frame_lists_safe_first(self, source) -> None:
        report = screen(
            SafetyScreener(source, retry=NO_RETRY_DELAY), ["LOSS", "SAFE", "THIN"]
        )
        frame = report.to_frame()
        assert list(frame["symbol"])[0] == "SAFE"
        assert list(frame["is_safe_to_trade"]) == [True, False, False]

    def test_risk_counts(self, source) -> None:
        report = screen(SafetyScreener(source, retry=NO_RETRY_DELAY), ["SAFE", "CHOP"])
        assert report.risk_counts == {"Low": 2}

    def test_empty(self) -> None:
        report = ScreeningReport(())
        assert report.total == 0
        assert report.to_frame().empty
