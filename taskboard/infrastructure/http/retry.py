"""
Bounded retries with linear backoff.

Only transient failures are retried: timeouts, connection failures
and 5xx responses. A 4xx is a definitive answer from a reachable
server and is raised on first occurrence.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from taskboard.domain.shared.errors import (
    ApiConnectionError,
    HttpStatusError,
    RequestTimeoutError,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


def is_retryable(error: BaseException) -> bool:
    """Check if a failure is transient.

    Example:
        >>> is_retryable(HttpStatusError(503))
        True
        >>> is_retryable(HttpStatusError(404))
        False
    """
    if isinstance(error, (RequestTimeoutError, ApiConnectionError)):
        return True
    if isinstance(error, HttpStatusError):
        return error.is_server_error
    return False


class RetryController:
    """Drives attempts of one call, sleeping between failures."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Optional[Sleep] = None,
    ) -> None:
        """Initialize controller.

        Args:
            max_attempts: Attempt budget per call (>= 1)
            base_delay: Seconds; wait after attempt n is base_delay * n
            sleep: Awaitable sleep, injectable for tests
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep or asyncio.sleep

    def delay_for(self, attempt: int) -> float:
        """Wait before the attempt following ``attempt`` (1-based)."""
        return self.base_delay * attempt

    async def execute(
        self,
        attempt_fn: Callable[[], Awaitable[T]],
        *,
        max_attempts: Optional[int] = None,
        operation: str = "",
    ) -> T:
        """Run attempt_fn until it succeeds or the budget is spent.

        Args:
            attempt_fn: Zero-arg coroutine factory performing one attempt
            max_attempts: Per-call override of the attempt budget
            operation: Label for logs

        Returns:
            Result of the first successful attempt

        Raises:
            The last observed error once retries are exhausted, or the
            first non-retryable error
        """
        budget = max_attempts or self.max_attempts
        if budget < 1:
            raise ValueError("max_attempts must be >= 1")

        attempt = 1
        while True:
            try:
                logger.debug("Attempt", operation=operation, attempt=attempt, max_attempts=budget)
                return await attempt_fn()

            except Exception as e:
                if not is_retryable(e):
                    logger.info(
                        "Non-retryable failure",
                        operation=operation,
                        attempt=attempt,
                        error=str(e),
                    )
                    raise

                if attempt >= budget:
                    logger.error(
                        "Request failed after retries",
                        operation=operation,
                        attempts=budget,
                        error=str(e),
                    )
                    raise

                wait = self.delay_for(attempt)
                logger.warning(
                    f"Attempt failed, retrying in {wait}s",
                    operation=operation,
                    attempt=attempt,
                    error=str(e),
                )
                await self._sleep(wait)
                attempt += 1
