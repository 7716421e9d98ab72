"""Generic async retry combinator."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tradescore.batch._config import RetryPolicy
from tradescore.exceptions import RateLimitedError, is_retryable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _sleep_for(policy: RetryPolicy, retry: int, error: BaseException) -> float:
    delay = policy.delay_for(retry)
    if policy.jitter:
        delay = random.uniform(0, delay)
    if isinstance(error, RateLimitedError) and error.retry_after:
        delay = max(delay, error.retry_after)
    return delay


async def retry_async(
    action: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    should_retry: Callable[[BaseException], bool] = is_retryable,
    on_retry: Callable[[int, BaseException, float], None] | None = None,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Await *action* until it succeeds or *policy* is exhausted.

    Parameters
    ----------
    action:
        Zero-arg coroutine factory; called once per attempt.
    policy:
        Attempt budget and delay schedule.
    should_retry:
        Predicate on the raised exception.  When it returns ``False`` the
        exception propagates immediately.
    on_retry:
        Called as ``on_retry(retry_number, error, delay)`` before each sleep.
    sleep:
        Awaitable sleep, replaceable in tests.

    Raises
    ------
    Exception
        The last error once attempts are exhausted or the error is not
        retryable.  Cancellation is never retried.
    """
    attempt = 1
    while True:
        try:
            return await action()
        except Exception as exc:
            if attempt >= policy.max_attempts or not should_retry(exc):
                raise
            delay = _sleep_for(policy, attempt, exc)
            if on_retry is not None:
                on_retry(attempt, exc, delay)
            else:
                logger.debug(
                    "Attempt %d/%d failed (%s); retrying in %.2fs",
                    attempt, policy.max_attempts, exc, delay,
                )
            await sleep(delay)
            attempt += 1
