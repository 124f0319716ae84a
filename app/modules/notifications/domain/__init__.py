"""Domain layer - records, errors and the lifecycle state machine."""

from modules.notifications.domain.errors import (
    ConflictError,
    NotFoundError,
    NotificationError,
    ValidationError,
)
from modules.notifications.domain.models import (
    DELIVERABLE_CHANNELS,
    ChannelPreferences,
    EmailContent,
    EmailPreference,
    InAppPreference,
    Notification,
    NotificationPreference,
    NotificationRequest,
    NotificationStatus,
    NotificationTemplate,
    PreferenceOverride,
    PreferenceOverrides,
    PriorityOverride,
    PushContent,
    PushPreference,
    QuietHours,
    SmsContent,
    SmsPreference,
    TemplateAction,
    TemplateVariable,
    VerificationStatus,
    WebhookContent,
    WebhookPreference,
)
from modules.notifications.domain.lifecycle import (
    ALLOWED_TRANSITIONS,
    READABLE_STATUSES,
    can_transition,
    ensure_transition,
)

__all__ = [
    # Errors
    "NotificationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    # Notifications
    "DELIVERABLE_CHANNELS",
    "Notification",
    "NotificationRequest",
    "NotificationStatus",
    # Templates
    "NotificationTemplate",
    "TemplateVariable",
    "TemplateAction",
    "EmailContent",
    "SmsContent",
    "PushContent",
    "WebhookContent",
    # Preferences
    "NotificationPreference",
    "QuietHours",
    "ChannelPreferences",
    "InAppPreference",
    "EmailPreference",
    "SmsPreference",
    "PushPreference",
    "WebhookPreference",
    "VerificationStatus",
    "PreferenceOverride",
    "PreferenceOverrides",
    "PriorityOverride",
    # Lifecycle
    "ALLOWED_TRANSITIONS",
    "READABLE_STATUSES",
    "can_transition",
    "ensure_transition",
]
