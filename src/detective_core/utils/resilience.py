"""Retry policies for the engine's external dependencies.

The engine itself never retries. The only transient dependencies are the
case library service (fetching a case) and the Redis session store at
startup; both use tenacity policies defined here.
"""

import logging
from typing import Any, Callable, Tuple, Type, TypeVar

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
    RetryCallState,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures worth retrying when talking to the case library: the request never
# produced an HTTP response. HTTP status errors (404 in particular) are final.
TRANSIENT_HTTP_ERRORS: Tuple[Type[BaseException], ...] = (httpx.TransportError,)


def _log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log each retry with the failing call and elapsed time."""
    fn_name = getattr(retry_state.fn, "__name__", "call")
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"[Resilience] Retry attempt {retry_state.attempt_number} for "
        f"{fn_name} after {retry_state.seconds_since_start:.1f}s. "
        f"Exception: {exception or 'Unknown'}"
    )


# Startup connections (Redis ping): 2s, 4s, 8s, 16s between 5 attempts
service_startup_retry = retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=2, max=32),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


def create_fetch_retry(
    max_attempts: int = 3,
    min_wait: float = 0.2,
    max_wait: float = 2.0,
    multiplier: float = 0.2,
    retry_on: Tuple[Type[BaseException], ...] = TRANSIENT_HTTP_ERRORS,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Create a retry decorator for case fetches.

    Args:
        max_attempts: Total attempts including the first call
        min_wait: Minimum wait time between retries (seconds)
        max_wait: Maximum wait time between retries (seconds)
        multiplier: Exponential backoff multiplier
        retry_on: Exception types that trigger a retry; anything else propagates

    Returns:
        A retry decorator; the last exception is re-raised when attempts run out

    Example:
        ```python
        fetch_retry = create_fetch_retry(max_attempts=5)

        @fetch_retry
        async def fetch_case():
            ...
        ```
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry_attempt,
        reraise=True,
    )
