"""Delivery retry configuration.

Defines the backoff parameters used by RetryPolicy. A webhook channel record
can carry its own `retry` block; missing keys fall back to RetrySettings.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from infrastructure.configuration import RetrySettings


@dataclass
class RetryConfig:
    """Configuration for delivery retry behavior.

    Attributes:
        enabled: When False, exactly one attempt is made
        max_attempts: Total attempts including the first one
        initial_delay_seconds: Delay before the first retry
        backoff_factor: Multiplier applied to the delay for each further retry

    Example:
        # Default configuration
        config = RetryConfig()

        # From a channel record's retry block
        config = RetryConfig.from_channel_config(
            {"max_attempts": 5, "initial_delay": 0.5},
            defaults=settings.retry,
        )
    """

    enabled: bool = True
    max_attempts: int = 3
    initial_delay_seconds: float = 1.0
    backoff_factor: float = 2.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay_seconds < 0:
            raise ValueError("initial_delay_seconds must be >= 0")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")

    @property
    def effective_attempts(self) -> int:
        """Attempts actually made: one when retry is disabled."""
        return self.max_attempts if self.enabled else 1

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after the failed attempt number `attempt` (0-based)."""
        return self.initial_delay_seconds * (self.backoff_factor**attempt)

    @classmethod
    def from_settings(cls, settings: "RetrySettings") -> "RetryConfig":
        return cls(
            enabled=settings.enabled,
            max_attempts=settings.max_attempts,
            initial_delay_seconds=settings.initial_delay_seconds,
            backoff_factor=settings.backoff_factor,
        )

    @classmethod
    def from_channel_config(
        cls,
        retry_block: Optional[Dict[str, Any]],
        defaults: Optional["RetryConfig"] = None,
    ) -> "RetryConfig":
        """Build a config from a channel record's `retry` block.

        Accepted keys: enabled, max_attempts, initial_delay (seconds),
        backoff_factor.
        """
        base = defaults or cls()
        block = retry_block or {}
        return cls(
            enabled=bool(block.get("enabled", base.enabled)),
            max_attempts=int(block.get("max_attempts", base.max_attempts)),
            initial_delay_seconds=float(
                block.get("initial_delay", base.initial_delay_seconds)
            ),
            backoff_factor=float(block.get("backoff_factor", base.backoff_factor)),
        )
