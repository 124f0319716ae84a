"""Test factories for the notification engine.

Factory functions for creating channel records, notifications, templates and
preferences. All factories return Pydantic models.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from infrastructure.notifications.models import (
    ChannelConfig,
    ChannelStatus,
    ChannelType,
    DeliverySettings,
    NotificationPriority,
    OutboundNotification,
    PushPlatform,
    PushToken,
    WebhookEndpoint,
)
from modules.notifications.domain.models import (
    Notification,
    NotificationPreference,
    NotificationStatus,
    NotificationTemplate,
    TemplateVariable,
)

FIXED_NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def make_channel(
    name: str = "primary-email",
    type: ChannelType = ChannelType.EMAIL,
    provider: Optional[str] = "sendgrid",
    config: Optional[Dict[str, Any]] = None,
    status: ChannelStatus = ChannelStatus.ACTIVE,
    tags: Optional[List[str]] = None,
    created_at: Optional[datetime] = None,
) -> ChannelConfig:
    """Create a ChannelConfig record.

    Example:
        >>> channel = make_channel(name="sms", type=ChannelType.SMS, provider="twilio")
    """
    return ChannelConfig(
        name=name,
        type=type,
        provider=provider,
        config=config if config is not None else {"sendgrid": {"api_key": "SG.key"}},
        status=status,
        tags=tags or [],
        created_at=created_at or FIXED_NOW,
        updated_at=created_at or FIXED_NOW,
    )


def make_outbound(
    id: str = "n-1",
    title: str = "Deploy finished",
    message: str = "Build 42 is live",
    data: Optional[Dict[str, Any]] = None,
    priority: NotificationPriority = NotificationPriority.NORMAL,
    **kwargs: Any,
) -> OutboundNotification:
    return OutboundNotification(
        id=id,
        recipient=kwargs.pop("recipient", "user-1"),
        type=kwargs.pop("type", "deployment"),
        category=kwargs.pop("category", "system"),
        title=title,
        message=message,
        data=data or {},
        priority=priority,
        **kwargs,
    )


def make_notification(
    recipient: str = "user-1",
    channel: ChannelType = ChannelType.IN_APP,
    status: NotificationStatus = NotificationStatus.PENDING,
    **kwargs: Any,
) -> Notification:
    values: Dict[str, Any] = {
        "type": "deployment",
        "category": "system",
        "title": "Deploy finished",
        "message": "Build 42 is live",
        "created_at": FIXED_NOW,
        "updated_at": FIXED_NOW,
    }
    values.update(kwargs)
    return Notification(recipient=recipient, channel=channel, status=status, **values)


def make_template(
    name: str = "welcome",
    title_template: str = "Welcome {{name}}",
    message_template: str = "Hi {{name}}, your team is {{team}}",
    variables: Optional[List[TemplateVariable]] = None,
    **kwargs: Any,
) -> NotificationTemplate:
    return NotificationTemplate(
        name=name,
        title_template=title_template,
        message_template=message_template,
        variables=variables
        if variables is not None
        else [
            TemplateVariable(name="name", required=True, example_value="Ada"),
            TemplateVariable(name="team", default_value="Platform"),
        ],
        created_at=kwargs.pop("created_at", FIXED_NOW),
        **kwargs,
    )


def make_preference(user_id: str = "user-1", **kwargs: Any) -> NotificationPreference:
    return NotificationPreference.model_validate({"user_id": user_id, **kwargs})


def make_push_token(
    token: str = "device-token-1",
    platform: PushPlatform = PushPlatform.ANDROID,
    active: bool = True,
) -> PushToken:
    return PushToken(token=token, platform=platform, active=active)


def make_endpoint(
    url: str = "https://hooks.example.com/notify",
    secret: Optional[str] = "s3cret",
    events: Optional[List[str]] = None,
    active: bool = True,
) -> WebhookEndpoint:
    return WebhookEndpoint(url=url, secret=secret, events=events or [], active=active)


def make_delivery_settings(
    channel: ChannelType = ChannelType.EMAIL, **kwargs: Any
) -> DeliverySettings:
    return DeliverySettings(channel=channel, **kwargs)
