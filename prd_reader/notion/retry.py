"""Bounded exponential-backoff retry policy for flaky Notion calls."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from notion_client import APIErrorCode
from notion_client.errors import RequestTimeoutError

T = TypeVar("T")

RETRYABLE_CODES = frozenset(
    {APIErrorCode.RateLimited.value, APIErrorCode.ServiceUnavailable.value}
)
RETRYABLE_STATUSES = frozenset({429, 502, 503, 504})


def is_retryable_error(error: BaseException) -> bool:
    """
    Classify an error as transient (rate limited or service unavailable).

    Args:
        error: Exception raised by a Notion call

    Returns:
        True if the call may succeed when repeated
    """
    if isinstance(error, RequestTimeoutError):
        return True

    code = getattr(error, "code", None)
    if code is not None and str(getattr(code, "value", code)) in RETRYABLE_CODES:
        return True

    status = getattr(error, "status", None)
    return isinstance(status, int) and status in RETRYABLE_STATUSES


class RetryPolicy:
    """Runs an operation with up to ``max_attempts`` tries.

    The delay before attempt ``k + 1`` is ``base_delay * 2 ** (k - 1)``.
    Terminal errors are raised on first sight; after the last attempt the
    last retryable error is raised unchanged.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        is_retryable: Callable[[BaseException], bool] = is_retryable_error,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.is_retryable = is_retryable
        self.sleep = sleep
        self.logger = logging.getLogger(__name__)

    def delay_for(self, attempt: int) -> float:
        """Backoff to wait after failed attempt number ``attempt`` (1-based)."""
        return self.base_delay * (2 ** (attempt - 1))

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        deadline: Optional[float] = None,
        description: str = "operation",
    ) -> T:
        """
        Run ``operation`` until it succeeds, fails terminally, or attempts run out.

        Args:
            operation: Zero-argument coroutine function; called once per attempt
            deadline: Optional absolute event-loop time; no backoff sleep may
                extend past it
            description: Label used in log messages

        Returns:
            Result of the first successful attempt
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as e:
                if not self.is_retryable(e):
                    self.logger.debug(f"{description} failed with terminal error: {e}")
                    raise
                if attempt >= self.max_attempts:
                    self.logger.warning(
                        f"{description} failed after {attempt} attempts: {e}"
                    )
                    raise

                delay = self.delay_for(attempt)
                if deadline is not None:
                    loop = asyncio.get_running_loop()
                    if loop.time() + delay >= deadline:
                        self.logger.warning(
                            f"{description} not retried, deadline too close: {e}"
                        )
                        raise

                self.logger.warning(
                    f"{description} attempt {attempt}/{self.max_attempts} failed "
                    f"({e}); retrying in {delay:.1f}s"
                )
                await self.sleep(delay)
                attempt += 1
