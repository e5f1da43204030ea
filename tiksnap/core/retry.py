"""Retry policy for page requests."""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from tiksnap.core.exceptions import (
    EmptyResponseError,
    RateLimitedError,
    RetryableFetchError,
)
from tiksnap.utils.config import (
    ESCALATE_AFTER_ATTEMPTS,
    MAX_RETRIES,
    RETRY_INITIAL_WAIT,
    RETRY_MAX_WAIT,
    RETRY_MULTIPLIER,
)
from tiksnap.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]
OnRetryFn = Callable[[int, BaseException, float], None]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff policy.

    - max_retries counts retries after the first attempt (5 => 6 attempts).
    - initial_wait is the delay after the first failure; each further delay
      is multiplied by ``multiplier`` and capped at ``max_wait``.
    - escalate_after is the attempt number from which empty and rate-limited
      responses stop being retried.
    """
    max_retries: int = MAX_RETRIES
    initial_wait: float = RETRY_INITIAL_WAIT
    multiplier: float = RETRY_MULTIPLIER
    max_wait: float = RETRY_MAX_WAIT
    escalate_after: int = ESCALATE_AFTER_ATTEMPTS

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_wait < 0:
            raise ValueError("initial_wait must be >= 0")
        if self.max_wait < self.initial_wait:
            raise ValueError("max_wait must be >= initial_wait")
        if self.escalate_after < 1:
            raise ValueError("escalate_after must be >= 1")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


DEFAULT_RETRY_POLICY = RetryPolicy()


def _make_before_sleep(on_retry: Optional[OnRetryFn]) -> Callable[[RetryCallState], None]:
    def _before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"Retry attempt {retry_state.attempt_number} due to: {exc!r} "
            f"(waiting {delay:.1f}s)"
        )
        if on_retry is not None:
            on_retry(retry_state.attempt_number, exc, delay)

    return _before_sleep


async def with_retry(
    attempt_fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    *,
    sleep: SleepFn = asyncio.sleep,
    on_retry: Optional[OnRetryFn] = None,
) -> T:
    """
    Await ``attempt_fn()`` until it succeeds or fails terminally.

    Only RetryableFetchError subclasses are retried. Empty and rate-limited
    responses raised on attempt ``policy.escalate_after`` or later are
    converted to their terminal counterparts. Every other exception
    propagates on its first occurrence.

    Args:
        attempt_fn: Coroutine function performing one attempt
        policy: Retry policy
        sleep: Awaitable sleep used between attempts
        on_retry: Called as ``on_retry(attempt_number, exception, delay)``
            before each wait

    Returns:
        The first successful result

    Raises:
        FetchError: The terminal failure
    """
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(RetryableFetchError),
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(
            multiplier=policy.initial_wait,
            exp_base=policy.multiplier,
            min=policy.initial_wait,
            max=policy.max_wait,
        ),
        sleep=sleep,
        before_sleep=_make_before_sleep(on_retry),
        reraise=True,
    )

    async for attempt in retrying:
        with attempt:
            try:
                result = await attempt_fn()
            except (EmptyResponseError, RateLimitedError) as e:
                if attempt.retry_state.attempt_number >= policy.escalate_after:
                    raise e.escalate() from e
                raise

    return result
