"""Delivery retry infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class RetrySettings(InfrastructureSettings):
    """Fallback retry configuration for outbound delivery calls.

    A webhook channel record may carry its own `retry` block. Any key it
    omits falls back to these values.

    Environment Variables:
        DELIVERY_RETRY_ENABLED: Retry retryable failures (default: True)
        DELIVERY_RETRY_MAX_ATTEMPTS: Total attempts including the first (default: 3)
        DELIVERY_RETRY_INITIAL_DELAY_SECONDS: Delay before the first retry (default: 1.0)
        DELIVERY_RETRY_BACKOFF_FACTOR: Multiplier applied per attempt (default: 2.0)

    Exponential Backoff:
        Delay before retry n (n counted from 0): initial_delay * factor ^ n

        Example with defaults (initial=1s, factor=2):
            After attempt 1: 1s
            After attempt 2: 2s
            Attempt 3 is the last one

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.retry.enabled:
            attempts = settings.retry.max_attempts
        ```
    """

    enabled: bool = Field(
        default=True,
        alias="DELIVERY_RETRY_ENABLED",
        description="Retry retryable delivery failures",
    )
    max_attempts: int = Field(
        default=3,
        alias="DELIVERY_RETRY_MAX_ATTEMPTS",
        description="Maximum attempts per delivery, first attempt included",
    )
    initial_delay_seconds: float = Field(
        default=1.0,
        alias="DELIVERY_RETRY_INITIAL_DELAY_SECONDS",
        description="Delay before the first retry (seconds)",
    )
    backoff_factor: float = Field(
        default=2.0,
        alias="DELIVERY_RETRY_BACKOFF_FACTOR",
        description="Exponential backoff multiplier",
    )
