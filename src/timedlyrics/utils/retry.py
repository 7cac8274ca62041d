"""Retry utility with exponential backoff for provider requests."""

import time
from functools import wraps
from typing import Callable, TypeVar, Any, Optional, Type, Tuple

from ..utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

# Default retry settings
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0  # seconds
DEFAULT_MAX_DELAY = 30.0  # seconds
DEFAULT_BACKOFF_FACTOR = 2.0


def retry_with_backoff(
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable[[Exception, int], None]] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator that retries a function with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        backoff_factor: Multiplier for delay after each retry
        exceptions: Tuple of exception types to catch and retry
        on_retry: Optional callback called on each retry with (exception, attempt)

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        logger.warning(
                            f"All {max_retries} retries exhausted for {func.__name__}: {e}"
                        )
                        raise

                    logger.debug(
                        f"Retry {attempt + 1}/{max_retries} for {func.__name__}: {e}"
                    )
                    if on_retry:
                        on_retry(e, attempt + 1)

                    time.sleep(delay)
                    delay = min(delay * backoff_factor, max_delay)

            # Unreachable: the loop either returns or re-raises
            raise RuntimeError("Unexpected state in retry logic")

        return wrapper
    return decorator
