"""Delivery layer models.

Platform-agnostic models shared by the channel adapters, the channel
registry and the notification services:

- enums for channel type/status, priority and push platform
- OutboundNotification: the content an adapter delivers
- DeliverySettings: per-user destination details for one channel
- DeliveryOutcome: what an adapter reports back
- ChannelConfig: an administrator-managed channel record
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from infrastructure.models import InfrastructureModel

DEFAULT_TAG = "default"


class ChannelType(str, Enum):
    """Delivery media. `custom` channels are stored but have no adapter."""

    IN_APP = "in-app"
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"
    WEBHOOK = "webhook"
    CUSTOM = "custom"


class ChannelStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TESTING = "testing"
    ERROR = "error"


class NotificationPriority(str, Enum):
    """Notification priority levels.

    URGENT bypasses the recipient's quiet hours.
    """

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class PushPlatform(str, Enum):
    IOS = "ios"
    ANDROID = "android"
    WEB = "web"


class EmailFrequency(str, Enum):
    IMMEDIATE = "immediate"
    DIGEST = "digest"
    DAILY = "daily"
    WEEKLY = "weekly"


class NotificationAction(InfrastructureModel):
    """A call to action attached to a notification."""

    name: str
    text: str
    url: Optional[str] = None
    icon: Optional[str] = None
    is_primary: bool = False


class OutboundNotification(InfrastructureModel):
    """Content handed to a channel adapter.

    `data` carries channel-specific sub-payloads keyed by channel name
    (e.g. `data["email"]["subject"]`, `data["webhook"]["payload"]`) next
    to arbitrary application data.
    """

    id: str
    recipient: str
    type: str
    category: str
    title: str
    message: str
    priority: NotificationPriority = NotificationPriority.NORMAL
    data: Dict[str, Any] = Field(default_factory=dict)
    actions: List[NotificationAction] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    def channel_payload(self, channel: str) -> Dict[str, Any]:
        """Return the sub-payload for `channel`, or an empty dict."""
        payload = self.data.get(channel)
        return payload if isinstance(payload, dict) else {}


class PushToken(InfrastructureModel):
    """A device registration for push delivery.

    For web platforms `token` holds the JSON-encoded push subscription.
    """

    token: str
    device: Optional[str] = None
    platform: PushPlatform = PushPlatform.ANDROID
    last_used: Optional[datetime] = None
    active: bool = True


class WebhookEndpoint(InfrastructureModel):
    """A user-registered webhook destination.

    `events` lists subscribed `category.type` keys; `*` or an empty list
    subscribes to everything.
    """

    url: str
    secret: Optional[str] = None
    description: Optional[str] = None
    events: List[str] = Field(default_factory=list)
    active: bool = True

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Webhook URL must be http(s): {v}")
        return v

    def accepts(self, event_key: str) -> bool:
        """Check whether this endpoint subscribes to `event_key`."""
        return not self.events or "*" in self.events or event_key in self.events


class DeliverySettings(InfrastructureModel):
    """Per-user destination details for a single channel."""

    channel: ChannelType
    email_address: Optional[str] = None
    email_frequency: EmailFrequency = EmailFrequency.IMMEDIATE
    phone_number: Optional[str] = None
    push_tokens: List[PushToken] = Field(default_factory=list)
    webhook_endpoints: List[WebhookEndpoint] = Field(default_factory=list)


class DeliveryOutcome(InfrastructureModel):
    """Result of one adapter send.

    Attributes:
        success: True if the provider accepted the message
        message_id: Provider message id for single-destination sends
        message_ids: Provider message ids for fan-out sends (push, webhook)
        error: Error message when success is False
        queued: True when delivery was deferred (non-immediate email frequency)
        delivered_at: Set when delivery is confirmed immediately (in-app)
        channel_name: Name of the channel record that handled the send
        details: Per-destination detail (errors keyed by token or endpoint)
    """

    success: bool
    message_id: Optional[str] = None
    message_ids: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    queued: bool = False
    delivered_at: Optional[datetime] = None
    channel_name: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def failed(cls, error: str, **kwargs: Any) -> "DeliveryOutcome":
        return cls(success=False, error=error, **kwargs)


class DeliveryStats(InfrastructureModel):
    sent: int = 0
    delivered: int = 0
    failed: int = 0
    last_sent_at: Optional[datetime] = None


class ChannelCapabilities(InfrastructureModel):
    supports_templates: bool = True
    supports_attachments: bool = False
    supports_bulk_send: bool = False
    supports_scheduling: bool = False
    supports_tracking: bool = False


class RateLimit(InfrastructureModel):
    enabled: bool = False
    limit: int = 100
    window_seconds: int = 60


class ChannelConfig(InfrastructureModel):
    """An administrator-managed delivery channel (e.g. "primary-sendgrid").

    `config` holds the provider-specific blob; its shape depends on
    `type` and `provider`. At most one channel per type carries the
    `default` tag.
    """

    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    display_name: Optional[str] = None
    description: Optional[str] = None
    type: ChannelType
    provider: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)
    status: ChannelStatus = ChannelStatus.ACTIVE
    error_message: Optional[str] = None
    last_tested: Optional[datetime] = None
    capabilities: ChannelCapabilities = Field(default_factory=ChannelCapabilities)
    rate_limit: RateLimit = Field(default_factory=RateLimit)
    stats: DeliveryStats = Field(default_factory=DeliveryStats)
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_default(self) -> bool:
        return DEFAULT_TAG in self.tags

    @property
    def is_active(self) -> bool:
        return self.status == ChannelStatus.ACTIVE


REDACTED = "***"


def redact_config(value: Any, patterns: frozenset) -> Any:
    """Copy of a provider config blob with credential values replaced.

    Keys containing any of `patterns` (case-insensitive) are redacted at
    any depth.
    """
    if isinstance(value, dict):
        return {
            key: REDACTED
            if any(p in str(key).lower() for p in patterns) and item is not None
            else redact_config(item, patterns)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_config(item, patterns) for item in value]
    return value
