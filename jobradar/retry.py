"""Exponential-backoff retry for outbound calls."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from .errors import HttpError, RetryExhaustedError, UpstreamTimeoutError, UpstreamTransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, min_delay: float, max_delay: float, factor: float) -> float:
    """Base delay after the ``attempt``-th failure (1-indexed)."""
    return min(max_delay, min_delay * factor ** (attempt - 1))


async def with_retry(
    fn: Callable[[int], Awaitable[T]],
    *,
    retries: int = 3,
    min_delay: float = 0.25,
    max_delay: float = 5.0,
    factor: float = 2.0,
    jitter: bool = True,
    should_retry: Callable[[BaseException], bool] | None = None,
    on_retry: Callable[[BaseException, int, float], None] | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Call ``fn(attempt)`` until it succeeds, at most ``retries + 1`` times.

    A failure is retried only if ``should_retry`` (when given) accepts it.
    With ``jitter`` the delay is scaled by a uniform factor in [0.5, 1.5).
    When retrying stops, RetryExhaustedError is raised from the last failure.
    """

    def _retryable(exc: BaseException) -> bool:
        # cancellation is never retried
        if not isinstance(exc, Exception):
            return False
        return should_retry(exc) if should_retry else True

    def _wait(retry_state: RetryCallState) -> float:
        delay = backoff_delay(retry_state.attempt_number, min_delay, max_delay, factor)
        if jitter:
            delay *= 0.5 + random.random()
        return delay

    def _before_sleep(retry_state: RetryCallState) -> None:
        if on_retry:
            on_retry(retry_state.outcome.exception(), retry_state.attempt_number, retry_state.next_action.sleep)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(retries + 1),
        wait=_wait,
        retry=retry_if_exception(_retryable),
        before_sleep=_before_sleep,
        sleep=sleep,
        reraise=True,
    )

    try:
        async for attempt in retrying:
            with attempt:
                return await fn(attempt.retry_state.attempt_number)
    except Exception as exc:
        raise RetryExhaustedError("Retry attempts exhausted", exc) from exc


def is_retryable_upstream_error(exc: BaseException) -> bool:
    """Timeouts, transport failures, 408, 429 and 5xx are worth another try."""
    if isinstance(exc, (UpstreamTimeoutError, UpstreamTransportError)):
        return True
    if isinstance(exc, HttpError):
        return exc.status in (408, 429) or exc.status >= 500
    return False


def log_retry(name: str) -> Callable[[BaseException, int, float], None]:
    """Build an ``on_retry`` callback that logs under the caller's name."""

    def _log(exc: BaseException, attempt: int, delay: float) -> None:
        logger.warning("%s failed (attempt %d): %s; retrying in %.2fs", name, attempt, exc, delay)

    return _log
