"""Retry utilities and error classification for LLM calls."""

import logging
import time
from functools import wraps
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Indicators checked against the lowercased exception message and type name
_ERROR_KIND_INDICATORS = (
    ('auth', (
        'authenticationerror', 'permissiondenied', 'invalid api key',
        'incorrect api key', 'unauthorized', '401', '403',
    )),
    ('quota', (
        'ratelimiterror', 'rate limit', 'quota', 'exceeded your current quota',
        'billing', 'insufficient credits', '402', '429',
    )),
    ('timeout', ('timeout', 'timed out')),
    ('network', (
        'connectionerror', 'apiconnectionerror', 'connection refused',
        'connection reset', 'name or service not known', 'network',
        'serviceunavailable', '502', '503', '504',
    )),
)

NON_RETRYABLE_KINDS = ('auth', 'quota')


def classify_error_kind(exception: Exception) -> str:
    """
    Map an exception raised by an LLM client to an error kind.

    Args:
        exception: Exception to classify

    Returns:
        One of 'auth', 'quota', 'timeout', 'network' or 'unknown'
    """
    kind = getattr(exception, 'kind', None)
    if kind:
        return kind

    if isinstance(exception, TimeoutError):
        return 'timeout'
    if isinstance(exception, ConnectionError):
        return 'network'

    error_str = str(exception).lower()
    error_type = type(exception).__name__.lower()
    for kind, indicators in _ERROR_KIND_INDICATORS:
        if any(indicator in error_str or indicator in error_type for indicator in indicators):
            return kind
    return 'unknown'


def is_non_retryable_error(exception: Exception) -> bool:
    """Authentication and quota errors are not transient and are never retried."""
    return classify_error_kind(exception) in NON_RETRYABLE_KINDS


def retry_with_backoff(
    max_retries: int = 2,
    initial_delay: float = 1.0,
    backoff_factor: float = 2.0,
    exceptions: tuple = (Exception,),
    log_errors: bool = True,
    skip_non_retryable: bool = True
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts
        initial_delay: Initial delay in seconds before first retry
        backoff_factor: Multiplier for delay between retries
        exceptions: Tuple of exceptions to catch and retry on
        log_errors: Whether to log retry attempts
        skip_non_retryable: If True, auth and quota errors are raised immediately

    Returns:
        Decorated function
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            delay = initial_delay
            last_exception = None

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    if skip_non_retryable and is_non_retryable_error(e):
                        if log_errors:
                            logger.error(
                                f"{func.__name__} hit {classify_error_kind(e)} error (not retrying): {e}"
                            )
                        raise

                    if attempt < max_retries:
                        if log_errors:
                            logger.warning(
                                f"{func.__name__} failed (attempt {attempt + 1}/{max_retries + 1}): {e}. "
                                f"Retrying in {delay:.2f}s..."
                            )
                        time.sleep(delay)
                        delay *= backoff_factor
                    elif log_errors:
                        logger.error(
                            f"{func.__name__} failed after {max_retries + 1} attempts: {e}"
                        )

            raise last_exception

        return wrapper
    return decorator
