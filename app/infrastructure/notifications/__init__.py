"""Notification delivery layer.

Channel adapters, provider clients and the channel registry that turn a
rendered notification into a provider send.

Usage:
    from infrastructure.notifications import (
        ChannelType,
        DeliverySettings,
        OutboundNotification,
    )

    outcome = registry.send_notification(
        ChannelType.SMS,
        OutboundNotification(id="n-1", recipient="u-1", type="alert",
                             category="system", title="Hi", message="Hello"),
        DeliverySettings(channel=ChannelType.SMS, phone_number="+15550100"),
    )
"""

from infrastructure.notifications.channels import (
    ChannelAdapter,
    EmailAdapter,
    InAppAdapter,
    PushAdapter,
    SmsAdapter,
    WebhookAdapter,
)
from infrastructure.notifications.models import (
    DEFAULT_TAG,
    ChannelCapabilities,
    ChannelConfig,
    ChannelStatus,
    ChannelType,
    DeliveryOutcome,
    DeliverySettings,
    DeliveryStats,
    EmailFrequency,
    NotificationAction,
    NotificationPriority,
    OutboundNotification,
    PushPlatform,
    REDACTED,
    PushToken,
    RateLimit,
    WebhookEndpoint,
    redact_config,
)
from infrastructure.notifications.registry import ChannelRegistry
from infrastructure.notifications.stats import (
    format_success_rate,
    record_delivery_attempt,
)

__all__ = [
    # Models
    "DEFAULT_TAG",
    "ChannelCapabilities",
    "ChannelConfig",
    "ChannelStatus",
    "ChannelType",
    "DeliveryOutcome",
    "DeliverySettings",
    "DeliveryStats",
    "EmailFrequency",
    "NotificationAction",
    "NotificationPriority",
    "OutboundNotification",
    "PushPlatform",
    "PushToken",
    "RateLimit",
    "WebhookEndpoint",
    "REDACTED",
    "redact_config",
    # Adapters
    "ChannelAdapter",
    "InAppAdapter",
    "EmailAdapter",
    "SmsAdapter",
    "PushAdapter",
    "WebhookAdapter",
    # Registry and stats
    "ChannelRegistry",
    "record_delivery_attempt",
    "format_success_rate",
]
