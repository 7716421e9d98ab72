"""Shared test fixtures for the tradescore test suite."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from tradescore.data import Bar

START = datetime(2024, 1, 2, tzinfo=timezone.utc)

BarFactory = Callable[..., list[Bar]]


def _make_bars(
    closes: Sequence[float],
    volumes: Sequence[int] | None = None,
    spread: float = 0.01,
) -> list[Bar]:
    """Bars around *closes*: open at the previous close, high/low +/- spread."""
    bars = []
    previous = closes[0]
    for i, close in enumerate(closes):
        high = max(previous, close) * (1 + spread)
        low = min(previous, close) * (1 - spread)
        bars.append(
            Bar(
                timestamp=START + timedelta(days=i),
                open=float(previous),
                high=float(high),
                low=float(low),
                close=float(close),
                volume=int(volumes[i]) if volumes is not None else 1_000_000,
            )
        )
        previous = close
    return bars


@pytest.fixture()
def make_bars() -> BarFactory:
    """Factory building bars from a close series."""
    return _make_bars


@pytest.fixture()
def random_walk_bars() -> list[Bar]:
    """Synthetic random walk: 250 bars, seed 42."""
    rng = np.random.default_rng(42)
    closes = 100 * np.cumprod(1 + rng.normal(0.0005, 0.015, size=250))
    volumes = rng.integers(500_000, 2_000_000, size=250)
    return _make_bars(closes.tolist(), volumes.tolist())


@pytest.fixture()
def uptrend_bars() -> list[Bar]:
    """Steady 1% daily rise over 120 bars."""
    closes = [100 * 1.01**i for i in range(120)]
    return _make_bars(closes)


@pytest.fixture()
def downtrend_bars() -> list[Bar]:
    """Steady 1% daily decline over 120 bars."""
    closes = [100 * 0.99**i for i in range(120)]
    return _make_bars(closes)


@pytest.fixture()
def short_bars() -> list[Bar]:
    """Five bars, shorter than every indicator window."""
    return _make_bars([103.0, 105.0, 106.0, 108.0, 109.0])


@pytest.fixture()
def full_facts() -> dict[str, float]:
    """A complete, healthy-looking fact set."""
    return {
        "roe": 0.22,
        "roa": 0.11,
        "net_profit_margin": 0.18,
        "revenue_growth": 0.12,
        "eps_growth": 0.15,
        "pe_ratio": 18.0,
        "pb_ratio": 2.5,
        "peg_ratio": 1.2,
        "debt_to_equity": 0.6,
        "current_ratio": 1.8,
        "interest_coverage": 12.0,
        "asset_turnover": 0.9,
        "inventory_turnover": 8.0,
        "eps_estimate_current": 2.2,
        "eps_estimate_prior": 2.0,
        "short_percent_of_float": 0.03,
        "put_call_ratio": 0.8,
        "analyst_rating_score": 0.6,
    }
