"""Webhook delivery infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class WebhookSettings(InfrastructureSettings):
    """Outbound webhook request configuration.

    Environment Variables:
        WEBHOOK_TIMEOUT_SECONDS: Per-request timeout (default: 10s)
        WEBHOOK_USER_AGENT: User-Agent header sent to endpoints
        WEBHOOK_HEADER_PREFIX: Prefix for timestamp and signature headers
    """

    WEBHOOK_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        alias="WEBHOOK_TIMEOUT_SECONDS",
        description="Timeout for a single webhook request (seconds)",
    )
    WEBHOOK_USER_AGENT: str = Field(
        default="Notification-Webhook/1.0",
        alias="WEBHOOK_USER_AGENT",
    )
    WEBHOOK_HEADER_PREFIX: str = Field(
        default="X-Notification",
        alias="WEBHOOK_HEADER_PREFIX",
        description="Headers are sent as <prefix>-Timestamp and <prefix>-Signature",
    )
