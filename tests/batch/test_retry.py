"""Tests for the async retry combinator."""

from __future__ import annotations

import asyncio

import pytest

from tradescore.batch import RetryPolicy, retry_async
from tradescore.exceptions import DataUnavailableError, NotFoundError, RateLimitedError


class Flaky:
    """Fails *failures* times with *error*, then returns "ok"."""

    def __init__(self, failures: int, error: Exception) -> None:
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class TestRetryAsync:
    def test_succeeds_after_retries(self) -> None:
        action = Flaky(2, DataUnavailableError("test", "down"))
        sleep = SleepRecorder()
        result = asyncio.run(retry_async(action, RetryPolicy.linear(3, 2.0), sleep=sleep))
        assert result == "ok"
        assert action.calls == 3
        assert sleep.delays == [2.0, 4.0]

    def test_exhausted_raises_last_error(self) -> None:
        action = Flaky(10, DataUnavailableError("test", "down"))
        with pytest.raises(DataUnavailableError):
            asyncio.run(retry_async(action, RetryPolicy.linear(2, 0.0), sleep=SleepRecorder()))
        assert action.calls == 3

    def test_non_retryable_stops_immediately(self) -> None:
        action = Flaky(10, NotFoundError("test", "nope"))
        with pytest.raises(NotFoundError):
            asyncio.run(retry_async(action, RetryPolicy.linear(3, 0.0), sleep=SleepRecorder()))
        assert action.calls == 1

    def test_custom_predicate(self) -> None:
        action = Flaky(1, NotFoundError("test", "nope"))
        result = asyncio.run(
            retry_async(
                action,
                RetryPolicy.fixed(1, 0.0),
                should_retry=lambda _: True,
                sleep=SleepRecorder(),
            )
        )
        assert result == "ok"

    def test_retry_after_is_honoured(self) -> None:
        action = Flaky(1, RateLimitedError("test", retry_after=7.0))
        sleep = SleepRecorder()
        asyncio.run(retry_async(action, RetryPolicy.fixed(1, 1.0), sleep=sleep))
        assert sleep.delays == [7.0]

    def test_jitter_bounded(self) -> None:
        action = Flaky(3, DataUnavailableError("test", "down"))
        sleep = SleepRecorder()
        policy = RetryPolicy.exponential(3, base_delay=1.0)
        asyncio.run(retry_async(action, policy, sleep=sleep))
        assert all(0.0 <= d <= policy.delay_for(n + 1) for n, d in enumerate(sleep.delays))

    def test_on_retry_callback(self) -> None:
        calls: list[tuple[int, float]] = []
        action = Flaky(2, DataUnavailableError("test", "down"))
        asyncio.run(
            retry_async(
                action,
                RetryPolicy.fixed(2, 0.5),
                on_retry=lambda n, _exc, delay: calls.append((n, delay)),
                sleep=SleepRecorder(),
            )
        )
        assert calls == [(1, 0.5), (2, 0.5)]
