"""Delivery retry policy.

Bounded exponential backoff for outbound provider calls, with retryable
classification driven by OperationResult status.

Usage:
    from infrastructure.resilience.retry import RetryConfig, RetryPolicy

    policy = RetryPolicy(RetryConfig(max_attempts=3, initial_delay_seconds=1))
    result = policy.execute(send_once)
"""

from infrastructure.resilience.retry.config import RetryConfig
from infrastructure.resilience.retry.policy import RetryExhaustedError, RetryPolicy

__all__ = [
    "RetryConfig",
    "RetryExhaustedError",
    "RetryPolicy",
]
