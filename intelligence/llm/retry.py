"""
Retry helpers
Bounded retries driven by a retryability predicate and a server-derived delay
"""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from utils.exceptions import CapacityError


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    *,
    is_retryable: Callable[[BaseException], bool],
    delay_for: Callable[[BaseException], float],
    max_attempts: int = 3,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await `func` up to `max_attempts` times.

    Only errors accepted by `is_retryable` are retried, after sleeping
    `delay_for(error)` seconds. Other errors propagate immediately; when the
    attempts run out the last error is raised.
    """

    def _wait(retry_state: RetryCallState) -> float:
        return max(0.0, float(delay_for(retry_state.outcome.exception())))

    def _before_sleep(retry_state: RetryCallState) -> None:
        logger.warning(
            "Attempt %d/%d failed (%s); retrying in %.1fs",
            retry_state.attempt_number,
            max_attempts,
            retry_state.outcome.exception(),
            retry_state.next_action.sleep if retry_state.next_action else 0.0,
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, int(max_attempts))),
        wait=_wait,
        retry=retry_if_exception(is_retryable),
        before_sleep=_before_sleep,
        sleep=sleep,
        reraise=True,
    )

    async for attempt in retrying:
        with attempt:
            result = await func()
    return result


def is_capacity_error(error: BaseException) -> bool:
    return isinstance(error, CapacityError) and error.estimated_time is not None


def capacity_delay(margin_seconds: float = 1.0) -> Callable[[BaseException], float]:
    """Delay function: the server's estimated wait plus a fixed margin."""

    def _delay(error: BaseException) -> float:
        estimated = getattr(error, "estimated_time", None) or 0.0
        return float(estimated) + float(margin_seconds)

    return _delay
