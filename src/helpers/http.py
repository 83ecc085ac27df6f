"""HTTP client utilities and helpers."""

from asyncio import get_running_loop, sleep
from functools import wraps

from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar

import httpx

from src.helpers.constants import (
    DEFAULT_TIMEOUT,
    MAX_KEEPALIVE_CONNECTIONS,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)
from src.helpers.http_models import RetryPolicy
from src.helpers.logging import get_logger


logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

# 2**32 * base_delay is already far beyond any sensible max_delay
_MAX_BACKOFF_EXPONENT = 32


class RetriesExhaustedError(Exception):
    """Raised when a retried call keeps failing past its retry policy."""

    def __init__(
        self, operation: str, attempts: int, last_error: BaseException | None
    ) -> None:
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{operation} failed after {attempts} attempts: {last_error}"
        )


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number ``attempt + 1`` (0-indexed attempt)."""
    return min(base_delay * (2 ** min(attempt, _MAX_BACKOFF_EXPONENT)), max_delay)


def retry_with_backoff(
    max_retries: int | None = MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
    max_delay: float = RETRY_MAX_DELAY,
    *,
    deadline: float | None = None,
    retry_on: tuple[type[Exception], ...] = (httpx.HTTPError,),
    log_errors: bool = True,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator to retry async functions with exponential backoff.

    Args:
        max_retries: Maximum number of attempts, None to retry until cancelled
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries
        deadline: Seconds after the first attempt past which no retry is scheduled
        retry_on: Exception types treated as transient, anything else propagates
        log_errors: Whether to log retry attempts (default: True)

    Returns:
        Decorated function that retries on the given exception types

    Raises:
        RetriesExhaustedError: When attempts or the deadline run out

    Example:
        ```python
        from src.helpers.http import retry_with_backoff

        @retry_with_backoff(max_retries=3, base_delay=2.0)
        async def fetch_data(client: httpx.AsyncClient, url: str) -> dict:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()

        # Will retry up to 3 times with delays of 2s, 4s
        ```
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            loop = get_running_loop()
            started = loop.time()
            attempt = 0

            while True:
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    last_exception: Exception = e

                attempt += 1
                attempts_left = max_retries is None or attempt < max_retries
                delay = backoff_delay(attempt - 1, base_delay, max_delay)
                within_deadline = (
                    deadline is None or loop.time() - started + delay <= deadline
                )

                if not (attempts_left and within_deadline):
                    if log_errors:
                        logger.error(
                            "%s failed after %d attempts", func.__name__, attempt
                        )
                    raise RetriesExhaustedError(
                        func.__name__, attempt, last_exception
                    ) from last_exception

                if log_errors:
                    logger.warning(
                        "%s error (attempt %d/%s), retrying in %.1fs: %r",
                        func.__name__,
                        attempt,
                        max_retries if max_retries is not None else "inf",
                        delay,
                        last_exception,
                    )
                await sleep(delay)

        return wrapper

    return decorator


def retry_with_policy(
    policy: RetryPolicy, **kwargs: Any
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Build a retry_with_backoff decorator from a RetryPolicy.

    Args:
        policy: Retry schedule to apply
        **kwargs: Extra retry_with_backoff keyword arguments

    Returns:
        Configured decorator
    """
    return retry_with_backoff(
        policy.max_retries,
        policy.base_delay,
        policy.max_delay,
        deadline=policy.deadline,
        **kwargs,
    )


def create_http_client(
    timeout: float = DEFAULT_TIMEOUT,
    max_connections: int | None = None,
    **kwargs: Any,
) -> httpx.AsyncClient:
    """Create a configured httpx AsyncClient.

    Args:
        timeout: Default timeout in seconds (default: DEFAULT_TIMEOUT)
        max_connections: Size of the connection pool, None for no limit
        **kwargs: Additional httpx.AsyncClient kwargs

    Returns:
        Configured AsyncClient instance

    Example:
        ```python
        from src.helpers.http import create_http_client

        async with create_http_client(timeout=60.0, max_connections=50) as client:
            response = await client.get("https://example.com")
        ```
    """
    limits = httpx.Limits(
        max_connections=max_connections,
        max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
    )
    return httpx.AsyncClient(timeout=timeout, limits=limits, **kwargs)


__all__ = [
    "RetriesExhaustedError",
    "backoff_delay",
    "create_http_client",
    "retry_with_backoff",
    "retry_with_policy",
]
