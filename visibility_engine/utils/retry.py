"""
Bounded Retry Policy

Reusable async retry wrapper with exponential backoff, independent of
the call site. Used around provider calls during query execution.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    exponential_base: float = 2.0

    def delay_for(self, attempt: int) -> float:
        """Backoff delay after the given (1-based) failed attempt."""
        delay = self.initial_delay * (self.exponential_base ** (attempt - 1))
        return min(delay, self.max_delay)


class RetryExhaustedError(Exception):
    """Raised when every attempt of a retried call failed."""

    def __init__(self, message: str, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


async def with_retry(
    fn: Callable[..., Awaitable[T]],
    *args: Any,
    config: Optional[RetryConfig] = None,
    should_retry: Optional[Callable[[BaseException], bool]] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    **kwargs: Any,
) -> T:
    """
    Call an async function, retrying failures with exponential backoff.

    Args:
        fn: Coroutine function to call
        *args: Positional arguments for fn
        config: Retry configuration (defaults to RetryConfig())
        should_retry: Predicate deciding whether an error is retryable.
            Non-retryable errors propagate immediately.
        sleep: Sleep function (injectable for tests)
        **kwargs: Keyword arguments for fn

    Returns:
        The first successful result

    Raises:
        RetryExhaustedError: When all attempts failed
    """
    config = config or RetryConfig()
    last_error: Optional[BaseException] = None

    for attempt in range(1, config.max_attempts + 1):
        try:
            return await fn(*args, **kwargs)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            last_error = e
            if should_retry is not None and not should_retry(e):
                raise

            if attempt < config.max_attempts:
                delay = config.delay_for(attempt)
                logger.warning(
                    f"Call failed (attempt {attempt}/{config.max_attempts}), "
                    f"retrying in {delay:.1f}s: {e}"
                )
                await sleep(delay)

    raise RetryExhaustedError(
        f"Max attempts exceeded. Last error: {last_error}",
        attempts=config.max_attempts,
        last_error=last_error,
    )
