"""Retry utilities with exponential backoff.

Usage:
    from live_football.utils.retry import retry_with_backoff, RetryableError

    @retry_with_backoff(max_retries=3, initial_delay=2.0, exceptions=(RetryableError,))
    def fetch_odds(url):
        ...
"""

import logging
import time
from functools import wraps
from typing import Callable, Optional, Tuple, Type, TypeVar

T = TypeVar('T')


class RetryableError(Exception):
    """Base exception for errors that should trigger a retry."""


class NonRetryableError(Exception):
    """Base exception for errors that should NOT trigger a retry."""


def retry_with_backoff(
    max_retries: int = 3,
    backoff_factor: float = 2.0,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exceptions: Tuple[Type[Exception], ...] = (RetryableError,),
    on_retry: Optional[Callable[[Exception, int], None]] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> Callable:
    """Decorator for retrying functions with exponential backoff.

    The n-th retry waits ``initial_delay * backoff_factor ** n`` seconds,
    capped at ``max_delay``.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        backoff_factor: Multiplier for delay between retries (default: 2.0)
        initial_delay: Delay in seconds before the first retry (default: 1.0)
        max_delay: Maximum delay between retries in seconds (default: 60.0)
        exceptions: Exception types that trigger a retry
        on_retry: Optional callback function(exception, attempt) called on each retry
        sleep: Function used to wait between attempts (default: time.sleep)

    Returns:
        Decorated function that re-raises the last exception once retries are exhausted
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            logger = logging.getLogger(func.__module__)
            delay = initial_delay

            for attempt in range(max_retries + 1):  # +1 for initial attempt
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        logger.error(
                            f"{func.__name__} failed after {max_retries + 1} attempts: {e}"
                        )
                        raise

                    logger.warning(
                        f"{func.__name__} attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                        f"Retrying in {delay:.1f}s..."
                    )

                    if on_retry:
                        on_retry(e, attempt)

                    (sleep or time.sleep)(delay)
                    delay = min(delay * backoff_factor, max_delay)

            raise RuntimeError("unreachable")  # pragma: no cover

        return wrapper
    return decorator
