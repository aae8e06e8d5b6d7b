"""Timeout Resilience Pattern."""

import asyncio
from collections.abc import Awaitable
from typing import Any

from apexlens.shared.domain.exceptions import ApexLensError
from apexlens.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class OperationTimeoutError(ApexLensError):
    """
    Raised when an operation times out.

    Named to avoid shadowing Python's built-in TimeoutError.
    """

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            f"Operation '{operation}' timed out after {timeout_seconds}s",
            {"operation": operation, "timeout_seconds": timeout_seconds},
        )
        self.operation = operation
        self.timeout_seconds = timeout_seconds


async def with_timeout_async(
    coro: Awaitable[Any],
    timeout_seconds: float,
    operation_name: str = "operation",
) -> Any:
    """Execute a coroutine with a timeout."""
    try:
        return await asyncio.wait_for(coro, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning(
            "operation_timeout",
            operation=operation_name,
            timeout=timeout_seconds,
        )
        raise OperationTimeoutError(operation_name, timeout_seconds)
