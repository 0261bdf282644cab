"""Utility modules for the live football dashboard."""

from .logging import get_logger, setup_logging
from .rate_limit import RateLimiter
from .retry import retry_with_backoff, RetryableError, NonRetryableError

__all__ = [
    "get_logger",
    "setup_logging",
    "RateLimiter",
    "retry_with_backoff",
    "RetryableError",
    "NonRetryableError",
]
