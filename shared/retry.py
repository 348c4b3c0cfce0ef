"""
Retry mechanism for resilient operations.

``RetryPolicy`` is the reusable unit: it is parameterized by the number of
retries, a backoff function, the exception classes considered transient and
an optional predicate that marks a *result* as transient (for example an HTTP
response with a 5xx status). The upstream client and the result store both
run their calls through one.

Cancellation is never retried: ``asyncio.CancelledError`` is not an
``Exception`` subclass, so it escapes both the attempt and the backoff sleep.
"""

import asyncio
from typing import Any, Optional, Callable, Awaitable, Tuple, Type

from shared.logging import get_logger


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(self,
                 max_retries: int = 3,
                 base_delay: float = 1.0,
                 max_delay: float = 60.0,
                 exponential_base: float = 2.0):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


def power_backoff(max_retries: int, base: float = 3.0) -> RetryConfig:
    """Backoff of ``base ** retry`` seconds: 3s, 9s, 27s... for base 3."""
    return RetryConfig(
        max_retries=max_retries,
        base_delay=base,
        exponential_base=base,
        max_delay=base ** max(max_retries, 1),
    )


class RetryError(Exception):
    """Exception raised when all retry attempts are exhausted."""
    def __init__(self, message: str, last_exception: Exception, attempts: int):
        super().__init__(message)
        self.last_exception = last_exception
        self.attempts = attempts


def _calculate_delay(retry: int, config: RetryConfig) -> float:
    """Calculate the wait before the given retry (1-based)."""
    delay = config.base_delay * (config.exponential_base ** (retry - 1))
    return min(delay, config.max_delay)


class RetryPolicy:
    """Runs an async callable, retrying transient failures with backoff."""

    def __init__(self,
                 name: str,
                 config: Optional[RetryConfig] = None,
                 retry_on: Tuple[Type[BaseException], ...] = (Exception,),
                 retry_if_result: Optional[Callable[[Any], bool]] = None,
                 on_retry: Optional[Callable[[str, int], None]] = None,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.name = name
        self.config = config or RetryConfig()
        self.retry_on = retry_on
        self.retry_if_result = retry_if_result
        self.on_retry = on_retry
        self.sleep = sleep
        self.logger = get_logger(f"retry.{name}")

    def delay_for(self, retry: int) -> float:
        return _calculate_delay(retry, self.config)

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Run ``func`` under this policy.

        Returns the first result that is not flagged by ``retry_if_result``.
        If the retries run out on flagged results, the last result is
        returned so the caller can inspect it. If they run out on exceptions,
        ``RetryError`` is raised carrying the last one. Exceptions outside
        ``retry_on`` propagate untouched on the first occurrence.
        """
        max_attempts = self.config.max_attempts
        last_exception: Optional[Exception] = None

        for attempt in range(1, max_attempts + 1):
            try:
                result = await func(*args, **kwargs)
            except self.retry_on as e:
                last_exception = e
                if attempt == max_attempts:
                    self.logger.error(
                        "All retry attempts exhausted",
                        attempt=attempt,
                        max_attempts=max_attempts,
                        operation=self.name,
                        error=str(e)
                    )
                    raise RetryError(
                        f"Operation {self.name} failed after {max_attempts} attempts",
                        last_exception=e,
                        attempts=max_attempts
                    ) from e
                reason = f"{type(e).__name__}: {e}"
            else:
                if self.retry_if_result is None or not self.retry_if_result(result):
                    if attempt > 1:
                        self.logger.info("Retry succeeded", attempt=attempt, operation=self.name)
                    return result
                if attempt == max_attempts:
                    self.logger.error(
                        "All retry attempts exhausted on unexpected result",
                        attempt=attempt,
                        max_attempts=max_attempts,
                        operation=self.name
                    )
                    return result
                reason = f"unexpected result: {result!r}"

            delay = self.delay_for(attempt)
            self.logger.warning(
                "Retry attempt failed, waiting before next attempt",
                retry=attempt,
                max_retries=self.config.max_retries,
                delay=delay,
                operation=self.name,
                reason=reason
            )
            if self.on_retry is not None:
                self.on_retry(self.name, attempt)

            await self.sleep(delay)

        # The loop always returns or raises; this guards a zero-attempt config
        raise RetryError(
            f"Unexpected error in retry policy for {self.name}",
            last_exception=last_exception or Exception("No attempt was made"),
            attempts=max_attempts
        )
