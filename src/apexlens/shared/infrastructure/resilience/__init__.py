"""
Resilience patterns for outbound calls.

Provides:
- Timeout
- Retry
"""

from .retry import RetryConfig, RetryExhausted, with_retry_async
from .timeout import OperationTimeoutError, with_timeout_async

__all__ = [
    "OperationTimeoutError",
    "with_timeout_async",
    "RetryConfig",
    "RetryExhausted",
    "with_retry_async",
]
