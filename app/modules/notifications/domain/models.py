"""Notification domain records.

Pydantic models persisted through the record store:

- Notification: one message to one recipient over one channel
- NotificationTemplate: versioned content with `{{variable}}` placeholders
- NotificationPreference: per-user delivery preferences
- NotificationRequest: the create-and-send input

Channel records (ChannelConfig) belong to the delivery layer and live in
`infrastructure.notifications.models`.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import pytz
from pydantic import Field, field_validator

from infrastructure.models import InfrastructureModel
from infrastructure.notifications.models import (
    ChannelType,
    EmailFrequency,
    NotificationAction,
    NotificationPriority,
    OutboundNotification,
    PushToken,
    WebhookEndpoint,
)

TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Channels a notification can be addressed to; `custom` has no adapter.
DELIVERABLE_CHANNELS = (
    ChannelType.IN_APP,
    ChannelType.EMAIL,
    ChannelType.SMS,
    ChannelType.PUSH,
    ChannelType.WEBHOOK,
)


class NotificationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"
    READ = "read"
    ARCHIVED = "archived"


def _validate_deliverable(channel: ChannelType) -> ChannelType:
    if channel not in DELIVERABLE_CHANNELS:
        raise ValueError(f"Unsupported notification channel: {channel.value}")
    return channel


class Notification(InfrastructureModel):
    """A notification record.

    `data` carries channel sub-payloads keyed by channel name next to
    arbitrary application data. `metadata` holds the request source plus
    delivery facts such as `queued` and the pinned `channel_name`.
    `dispatch_claimed_at` is set by whichever dispatcher takes ownership of
    a pending record; unclaimed pending records are left to the sweep.
    """

    id: Optional[str] = None
    recipient: str
    type: str
    category: str
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.NORMAL
    channel: ChannelType = ChannelType.IN_APP
    template: Optional[str] = None
    actions: List[NotificationAction] = Field(default_factory=list)
    status: NotificationStatus = NotificationStatus.PENDING
    scheduled_for: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    error_message: Optional[str] = None
    dispatch_claimed_at: Optional[datetime] = None
    is_active: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("channel")
    @classmethod
    def validate_channel(cls, v: ChannelType) -> ChannelType:
        return _validate_deliverable(v)

    def to_outbound(self) -> OutboundNotification:
        return OutboundNotification(
            id=self.id or "",
            recipient=self.recipient,
            type=self.type,
            category=self.category,
            title=self.title,
            message=self.message,
            priority=self.priority,
            data=self.data,
            actions=self.actions,
            created_at=self.created_at,
        )


class NotificationRequest(InfrastructureModel):
    """Input for create-and-send.

    Required fields are checked by the orchestrator so callers get one
    consistent message; enum fields are validated here.

    Attributes:
        template: Template name; when set, title/message come from rendering
        template_version: Pin a template version instead of the latest active
        template_data: Variables for template rendering
        channel_name: Send through this channel record instead of the default
    """

    recipient: Optional[str] = None
    type: Optional[str] = None
    category: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    template: Optional[str] = None
    template_version: Optional[int] = None
    template_data: Dict[str, Any] = Field(default_factory=dict)
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: Optional[NotificationPriority] = None
    channel: ChannelType = ChannelType.IN_APP
    channel_name: Optional[str] = None
    actions: Optional[List[NotificationAction]] = None
    scheduled_for: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    source: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("channel")
    @classmethod
    def validate_channel(cls, v: ChannelType) -> ChannelType:
        return _validate_deliverable(v)


# Templates


class TemplateVariable(InfrastructureModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    required: bool = False
    default_value: Optional[Any] = None
    example_value: Optional[Any] = None


class TemplateAction(InfrastructureModel):
    name: str
    text: str
    url_template: Optional[str] = None
    icon: Optional[str] = None
    is_primary: bool = False


class EmailContent(InfrastructureModel):
    subject: Optional[str] = None
    html_body: Optional[str] = None
    text_body: Optional[str] = None


class SmsContent(InfrastructureModel):
    text: Optional[str] = None


class PushContent(InfrastructureModel):
    title: Optional[str] = None
    body: Optional[str] = None


class WebhookContent(InfrastructureModel):
    payload: Optional[Any] = None


class NotificationTemplate(InfrastructureModel):
    """Versioned notification content.

    Every version of a template shares its `name`; `previous_version`
    links a version to the record it superseded. Lookups without an
    explicit version use the active record with the highest version.
    """

    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    display_name: Optional[str] = None
    description: Optional[str] = None
    type: str = "system"
    category: str = "general"
    title_template: str = Field(..., min_length=1)
    message_template: str = Field(..., min_length=1)
    default_priority: NotificationPriority = NotificationPriority.NORMAL
    channels: List[ChannelType] = Field(
        default_factory=lambda: [ChannelType.IN_APP]
    )
    email: EmailContent = Field(default_factory=EmailContent)
    sms: SmsContent = Field(default_factory=SmsContent)
    push: PushContent = Field(default_factory=PushContent)
    webhook: WebhookContent = Field(default_factory=WebhookContent)
    actions: List[TemplateAction] = Field(default_factory=list)
    variables: List[TemplateVariable] = Field(default_factory=list)
    is_active: bool = True
    version: int = Field(default=1, ge=1)
    previous_version: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Preferences


class QuietHours(InfrastructureModel):
    enabled: bool = False
    start: str = "22:00"
    end: str = "07:00"
    timezone: str = "UTC"

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not TIME_OF_DAY.match(v):
            raise ValueError(f"Time must be HH:MM (24h): {v}")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v


class InAppPreference(InfrastructureModel):
    enabled: bool = True
    show_badge: bool = True
    show_preview: bool = True


class EmailPreference(InfrastructureModel):
    enabled: bool = True
    address: Optional[str] = None
    frequency: EmailFrequency = EmailFrequency.IMMEDIATE
    digest_time: str = "09:00"
    weekly_day: int = Field(default=1, ge=0, le=6)

    @field_validator("digest_time")
    @classmethod
    def validate_digest_time(cls, v: str) -> str:
        if not TIME_OF_DAY.match(v):
            raise ValueError(f"Time must be HH:MM (24h): {v}")
        return v


class VerificationStatus(str, Enum):
    UNVERIFIED = "unverified"
    PENDING = "pending"
    VERIFIED = "verified"


class SmsPreference(InfrastructureModel):
    enabled: bool = False
    phone_number: Optional[str] = None
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED


class PushPreference(InfrastructureModel):
    enabled: bool = True
    tokens: List[PushToken] = Field(default_factory=list)


class WebhookPreference(InfrastructureModel):
    enabled: bool = False
    endpoints: List[WebhookEndpoint] = Field(default_factory=list)


class ChannelPreferences(InfrastructureModel):
    in_app: InAppPreference = Field(default_factory=InAppPreference)
    email: EmailPreference = Field(default_factory=EmailPreference)
    sms: SmsPreference = Field(default_factory=SmsPreference)
    push: PushPreference = Field(default_factory=PushPreference)
    webhook: WebhookPreference = Field(default_factory=WebhookPreference)

    def for_channel(self, channel: ChannelType) -> Optional[InfrastructureModel]:
        return getattr(self, channel.value.replace("-", "_"), None)


class PriorityOverride(InfrastructureModel):
    enabled: Optional[bool] = None
    channels: Dict[ChannelType, bool] = Field(default_factory=dict)


class PreferenceOverride(InfrastructureModel):
    """Override for one category, type or template.

    `None` for `enabled` means "no opinion"; an absent channel key falls
    through to the next, less specific level.
    """

    enabled: Optional[bool] = None
    channels: Dict[ChannelType, bool] = Field(default_factory=dict)
    frequency: Optional[EmailFrequency] = None
    priority_overrides: Dict[NotificationPriority, PriorityOverride] = Field(
        default_factory=dict
    )


class PreferenceOverrides(InfrastructureModel):
    categories: Dict[str, PreferenceOverride] = Field(default_factory=dict)
    types: Dict[str, PreferenceOverride] = Field(default_factory=dict)
    templates: Dict[str, PreferenceOverride] = Field(default_factory=dict)


class NotificationPreference(InfrastructureModel):
    """Delivery preferences for one user."""

    id: Optional[str] = None
    user_id: str = Field(..., min_length=1)
    enabled: bool = True
    quiet_hours: QuietHours = Field(default_factory=QuietHours)
    channels: ChannelPreferences = Field(default_factory=ChannelPreferences)
    overrides: PreferenceOverrides = Field(default_factory=PreferenceOverrides)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
