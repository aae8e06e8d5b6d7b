"""Sequential retry with exponential backoff for outbound telemetry calls."""

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from apexlens.shared.domain.exceptions import ApexLensError
from apexlens.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryConfig:
    """How many times to call and how long to wait in between.

    ``attempts`` counts every call, the first one included. The wait before
    attempt ``n + 1`` is ``backoff_seconds * 2 ** (n - 1)``, capped at
    ``max_backoff_seconds`` and scattered by +/-50% when ``jitter`` is set.
    """

    attempts: int = 3
    backoff_seconds: float = 0.5
    max_backoff_seconds: float = 10.0
    jitter: bool = True

    @classmethod
    def from_retry_count(cls, retries: int, backoff_seconds: float = 0.5) -> "RetryConfig":
        """Build a config where ``retries`` counts attempts after the first one."""
        return cls(attempts=max(retries, 0) + 1, backoff_seconds=backoff_seconds)

    def backoff_for(self, attempt: int) -> float:
        delay = min(self.backoff_seconds * 2 ** (attempt - 1), self.max_backoff_seconds)
        return delay * (0.5 + random.random()) if self.jitter else delay


class RetryExhausted(ApexLensError):
    """Every attempt failed; ``last_error`` is the final failure."""

    def __init__(self, operation: str, attempts: int, last_error: Exception):
        super().__init__(
            f"{operation} gave up after {attempts} attempt(s): {last_error}",
            {"operation": operation, "attempts": attempts},
        )
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


async def with_retry_async(
    call: Callable[[], Awaitable[Any]],
    config: RetryConfig | None = None,
    operation_name: str = "operation",
) -> Any:
    """Await ``call()`` until it succeeds or the attempts run out.

    ``call`` is invoked once per attempt so each attempt gets a fresh
    awaitable. Errors flagged ``non_retryable`` propagate immediately.
    """
    config = config or RetryConfig()
    attempt = 0

    while True:
        attempt += 1
        try:
            return await call()
        except Exception as e:
            if getattr(e, "non_retryable", False):
                raise
            if attempt >= config.attempts:
                logger.error("retry_exhausted", operation=operation_name, attempts=attempt, error=str(e))
                raise RetryExhausted(operation_name, attempt, e) from e

            delay = config.backoff_for(attempt)
            logger.warning(
                "retry_scheduled",
                operation=operation_name,
                attempt=attempt,
                remaining=config.attempts - attempt,
                delay=round(delay, 3),
                error=str(e),
            )
            await asyncio.sleep(delay)
