"""Retry mechanisms for network fetches."""

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Status codes worth another attempt; everything else fails immediately
RETRYABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})


def with_fetch_retry(
    max_retries: int = 2,
    base_delay: float = 0.5,
    max_delay: float = 5.0,
    backoff_factor: float = 2.0,
    retry_on: tuple[type[Exception], ...] = (httpx.TransportError,),
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator that adds retry logic with exponential backoff to a coroutine.

    Args:
        max_retries: Maximum number of retry attempts
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        backoff_factor: Multiplier for exponential backoff
        retry_on: Tuple of exception types to retry on

    Returns:
        Decorated coroutine function with retry logic
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    should_retry = isinstance(e, retry_on)

                    # Only some HTTP status errors are transient
                    if isinstance(e, httpx.HTTPStatusError):
                        should_retry = (
                            e.response.status_code in RETRYABLE_STATUS_CODES
                        )

                    if not should_retry or attempt == max_retries:
                        raise

                    delay = min(base_delay * (backoff_factor**attempt), max_delay)

                    logger.debug(
                        f"Fetch failed (attempt {attempt + 1}/{max_retries + 1}): {e}. "
                        f"Retrying in {delay:.2f}s..."
                    )

                    await asyncio.sleep(delay)

            raise RuntimeError("Unexpected retry loop exit")

        return wrapper

    return decorator
