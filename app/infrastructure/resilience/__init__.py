"""Resilience patterns for outbound delivery calls."""

from infrastructure.resilience.retry import (
    RetryConfig,
    RetryExhaustedError,
    RetryPolicy,
)

__all__ = [
    "RetryConfig",
    "RetryExhaustedError",
    "RetryPolicy",
]
