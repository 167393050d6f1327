"""
Resilience utilities for retrying transient failures.

This module provides:
- retry_request, which re-invokes an async operation on a geometric backoff schedule
- retry_with_backoff decorator applying the same policy to async functions
"""

import asyncio
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, TypeVar, ParamSpec

from clientguard.models.action import RetryAttempt
from clientguard.services.error_classifier import is_retryable
from clientguard.utils.logging import get_logger

logger = get_logger(__name__)

# Type variables for generic decorator
P = ParamSpec('P')
T = TypeVar('T')

DEFAULT_RETRIES = 3
DEFAULT_DELAY = 1.0
DEFAULT_BACKOFF_MULTIPLIER = 2.0


def max_total_delay(
    retries: int = DEFAULT_RETRIES,
    delay: float = DEFAULT_DELAY,
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
) -> float:
    """Worst-case time spent waiting between attempts, in seconds."""
    if backoff_multiplier == 1:
        return delay * retries
    return delay * (backoff_multiplier ** retries - 1) / (backoff_multiplier - 1)


async def retry_request(
    operation: Callable[[], Awaitable[T]],
    retries: int = DEFAULT_RETRIES,
    delay: float = DEFAULT_DELAY,
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
    on_retry: Optional[Callable[[RetryAttempt], Any]] = None
) -> T:
    """
    Invoke an async operation, retrying failures with exponential backoff.

    The operation runs at most ``retries + 1`` times. Waits between attempts
    are delay, delay * multiplier, delay * multiplier ** 2, ... seconds.
    A failure is propagated unchanged once retries are exhausted, or at once
    when it carries a 4xx transport response.

    Args:
        operation: Zero-argument coroutine function to invoke
        retries: Retries allowed after the first attempt (default: 3)
        delay: Wait before the first retry in seconds (default: 1.0)
        backoff_multiplier: Factor applied to the wait after each retry (default: 2.0)
        on_retry: Optional callback receiving each scheduled RetryAttempt

    Returns:
        Result of the first successful invocation

    Example:
        profile = await retry_request(lambda: client.get("/users/me"))
    """
    attempt = 0
    current_delay = delay

    while True:
        try:
            result = await operation()
        except Exception as e:
            if attempt >= retries:
                if retries > 0:
                    logger.error(f"Operation failed after {attempt + 1} attempts: {e}")
                raise

            if not is_retryable(e):
                logger.info(f"Operation failed with non-retryable client error: {e}")
                raise

            attempt += 1
            logger.warning(
                f"Operation failed on attempt {attempt}/{retries + 1}: {e}. "
                f"Retrying in {current_delay:.1f}s..."
            )

            if on_retry is not None:
                on_retry(RetryAttempt(attempt_number=attempt, delay=current_delay, last_error=e))

            await asyncio.sleep(current_delay)
            current_delay *= backoff_multiplier
            continue

        if attempt > 0:
            logger.info(f"Operation succeeded on attempt {attempt + 1}/{retries + 1}")

        return result


def retry_with_backoff(
    retries: int = DEFAULT_RETRIES,
    delay: float = DEFAULT_DELAY,
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
):
    """
    Decorator applying retry_request to an async function.

    Args:
        retries: Retries allowed after the first attempt (default: 3)
        delay: Wait before the first retry in seconds (default: 1.0)
        backoff_multiplier: Factor applied to the wait after each retry (default: 2.0)

    Returns:
        Decorated function with retry logic

    Example:
        @retry_with_backoff(retries=3, delay=1.0)
        async def fetch_sessions():
            return await api_client.get("/sessions")
    """
    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"{func.__name__} must be an async function")

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await retry_request(
                lambda: func(*args, **kwargs),
                retries=retries,
                delay=delay,
                backoff_multiplier=backoff_multiplier
            )

        return wrapper

    return decorator
