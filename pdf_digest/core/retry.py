"""
Retry with exponential backoff for remote calls.

``retry_async`` is independent of any particular client: it takes the
operation as a zero-argument coroutine factory, so the same helper drives
subsection summaries, simple summaries and anything else that talks to
the model endpoint.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from .exceptions import RetryExhaustedError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DelayFunction = Callable[[int], float]
SleepFunction = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt bound and backoff base for a retried operation."""
    max_retries: int = 3
    base_delay_ms: float = 1000
    
    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must not be negative")
    
    def delay_ms(self, attempt: int) -> float:
        """Delay after failed ``attempt`` (1-based): base * 2^(attempt-1)."""
        return exponential_backoff(self.base_delay_ms)(attempt)


def exponential_backoff(base_delay_ms: float) -> DelayFunction:
    """Build a delay function doubling ``base_delay_ms`` on every attempt."""
    def _delay(attempt: int) -> float:
        return base_delay_ms * (2 ** (attempt - 1))
    return _delay


async def sleep_ms(delay_ms: float) -> None:
    """Wait ``delay_ms`` milliseconds without blocking the event loop."""
    await asyncio.sleep(delay_ms / 1000)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    operation_name: str,
    max_retries: int = 3,
    delay: Optional[DelayFunction] = None,
    sleep: SleepFunction = sleep_ms,
) -> T:
    """
    Await ``operation`` until it succeeds or ``max_retries`` attempts failed.
    
    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        operation_name: Human readable name used in logs and the final error
        max_retries: Total number of attempts, at least 1
        delay: Maps the failed attempt number (1-based) to a delay in milliseconds
        sleep: Awaitable waiting the given number of milliseconds
        
    Returns:
        The first successful result
        
    Raises:
        RetryExhaustedError: After the last attempt failed
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")
    if delay is None:
        delay = exponential_backoff(1000)
    
    logger.info("Starting retried operation",
               operation=operation_name,
               max_attempts=max_retries)
    last_error: Optional[Exception] = None
    
    for attempt in range(1, max_retries + 1):
        try:
            logger.debug("Attempting operation",
                        operation=operation_name,
                        attempt=attempt,
                        max_attempts=max_retries)
            result = await operation()
            logger.info("Operation succeeded",
                       operation=operation_name,
                       attempt=attempt)
            return result
        
        except Exception as e:
            last_error = e
            
            if attempt == max_retries:
                logger.error("All attempts failed",
                            operation=operation_name,
                            attempts=max_retries,
                            error=str(e))
                break
            
            wait_ms = delay(attempt)
            logger.warning("Attempt failed, retrying",
                          operation=operation_name,
                          attempt=attempt,
                          delay_ms=wait_ms,
                          error=str(e))
            await sleep(wait_ms)
    
    raise RetryExhaustedError(operation_name, max_retries, last_error)


async def retry_with_policy(
    operation: Callable[[], Awaitable[T]],
    operation_name: str,
    policy: RetryPolicy,
    sleep: SleepFunction = sleep_ms,
) -> T:
    """Run ``retry_async`` with the bound and backoff of ``policy``."""
    return await retry_async(
        operation,
        operation_name,
        max_retries=policy.max_retries,
        delay=policy.delay_ms,
        sleep=sleep
    )
