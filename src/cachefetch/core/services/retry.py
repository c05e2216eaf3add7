"""Bounded retry loop with backoff."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from cachefetch.core.entities.request_options import RequestOptions, RetryStrategy
from cachefetch.core.exceptions import (
    FetchError,
    NetworkError,
    RequestCancelledError,
    RequestTimeoutError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def compute_backoff(
    attempt: int,
    delay: float,
    strategy: RetryStrategy | str,
    jitter: float = 0.1,
    max_delay: float = 30.0,
    rand: Callable[[], float] = random.random,
) -> float:
    """Return the sleep before retry number ``attempt + 1``.

    ``fixed`` always waits ``delay``. ``exponential`` waits
    ``min(delay * 2**attempt, max_delay)`` plus up to ``jitter`` seconds
    of random spread, so concurrent callers do not retry in lockstep.

    Args:
        attempt: Zero-based index of the attempt that just failed.
        delay: Base delay in seconds.
        strategy: Backoff strategy.
        jitter: Upper bound of the random term, in seconds.
        max_delay: Cap on the exponential term, in seconds.
        rand: Source of uniform values in ``[0, 1)``.

    Returns:
        Delay in seconds.
    """
    if RetryStrategy(strategy) is RetryStrategy.FIXED:
        return delay
    return min(delay * 2**attempt, max_delay) + rand() * jitter


def default_retry_on(response: Any, error: BaseException) -> bool:
    """Retry network failures, timeouts and 5xx responses.

    Caller cancellation is never retried. Errors that are not fetch
    errors (a failing parser, for instance) are not retried either.
    """
    if isinstance(error, RequestTimeoutError):
        return True
    if isinstance(error, RequestCancelledError):
        return False
    if isinstance(error, NetworkError):
        return True
    if isinstance(error, FetchError) and error.status is not None:
        return error.status >= 500
    return False


class RetryController:
    """Runs an attempt until it succeeds, is ineligible or retries run out."""

    def __init__(
        self,
        jitter: float = 0.1,
        max_delay: float = 30.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ) -> None:
        """Initialize the retry controller.

        Args:
            jitter: Upper bound of exponential jitter, in seconds.
            max_delay: Cap on the exponential delay, in seconds.
            sleep: Coroutine used to wait between attempts.
            rand: Source of uniform values in ``[0, 1)``.
        """
        self._jitter = jitter
        self._max_delay = max_delay
        self._sleep = sleep
        self._rand = rand

    async def run(
        self,
        attempt_fn: Callable[[], Awaitable[T]],
        options: RequestOptions,
    ) -> T:
        """Run ``attempt_fn`` with the retry policy from ``options``.

        A custom ``options.retry_on`` fully replaces the default
        eligibility predicate.

        Returns:
            The first successful result.

        Raises:
            Exception: The last failure once no retry is allowed.
        """
        attempt = 0
        while True:
            try:
                return await attempt_fn()
            except Exception as exc:
                if attempt >= options.retries or not self._should_retry(exc, options):
                    raise

                wait = compute_backoff(
                    attempt,
                    options.retry_delay,
                    options.retry_strategy,
                    jitter=self._jitter,
                    max_delay=self._max_delay,
                    rand=self._rand,
                )
                logger.debug(
                    "Retry attempt %d/%d in %.3fs after %s",
                    attempt + 1,
                    options.retries,
                    wait,
                    exc,
                )
                await self._sleep(wait)
                attempt += 1

    def _should_retry(self, error: Exception, options: RequestOptions) -> bool:
        response = getattr(error, "response", None)
        if options.retry_on is not None:
            return options.retry_on(response, error)
        return default_retry_on(response, error)
