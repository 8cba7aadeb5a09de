"""Async retry helper with exponential backoff for transient AI failures."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Iterator, TypeVar

from codeheal.core.log import logger

__all__ = ("TRANSIENT_ERRORS", "backoff_delays", "with_retry")

T = TypeVar("T")

# asyncio.TimeoutError is TimeoutError on 3.11+
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (TimeoutError, ConnectionError, OSError)


def backoff_delays(retries: int, base_delay: float = 1.0, max_delay: float = 30.0) -> Iterator[float]:
    """Delays before each retry: base, 2*base, 4*base ... capped at ``max_delay``."""
    for attempt in range(retries):
        yield min(base_delay * (2**attempt), max_delay)


async def with_retry(
    fn: Callable[..., Awaitable[T]],
    *args: Any,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    retryable: tuple[type[BaseException], ...] = (Exception,),
    label: str = "",
    **kwargs: Any,
) -> T:
    """
    Await ``fn(*args, **kwargs)``, retrying on ``retryable`` errors.

    ``max_retries=0`` means a single attempt. The last error is re-raised
    once retries are exhausted; non-retryable errors propagate at once.
    """
    tag = label or getattr(fn, "__name__", "unknown")
    delays = backoff_delays(max_retries, base_delay, max_delay)
    attempt = 1

    while True:
        try:
            return await fn(*args, **kwargs)
        except retryable as exc:
            delay = next(delays, None)
            if delay is None:
                logger.error(f"{tag}: giving up after {attempt} attempt(s) ({type(exc).__name__}: {exc})")
                raise
            logger.warning(
                f"{tag}: attempt {attempt}/{max_retries + 1} failed "
                f"({type(exc).__name__}: {exc}), retrying in {delay:.1f}s"
            )
            attempt += 1
            await asyncio.sleep(delay)
