"""Preference evaluation.

`is_enabled` decides whether a notification may be delivered to a user on
a channel. `get_delivery_settings` resolves where to deliver it.

Resolution order, most specific first: template override, type override,
category override (with its priority override), the channel's own flag.
A disabled global flag denies everything; quiet hours deny every priority
except `urgent` on every channel but `in-app`, whose inbox records stay
silent. A user without a preference record is allowed, and an
evaluation error is logged and allowed.
"""

from datetime import datetime, time, timezone
from typing import Optional

import pytz

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import (
    ChannelType,
    DeliverySettings,
    EmailFrequency,
    NotificationPriority,
)
from modules.notifications.domain.models import (
    NotificationPreference,
    PreferenceOverride,
    QuietHours,
)

logger = get_module_logger()


def _parse_time(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def in_quiet_hours(quiet_hours: QuietHours, now: Optional[datetime] = None) -> bool:
    """Check whether `now` falls in the half-open window [start, end).

    The window is evaluated in the user's timezone and wraps past
    midnight when start is later than end. Equal start and end is an
    empty window.
    """
    if not quiet_hours.enabled:
        return False

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(pytz.timezone(quiet_hours.timezone)).time()
    start = _parse_time(quiet_hours.start)
    end = _parse_time(quiet_hours.end)

    if start < end:
        return start <= local < end
    if start > end:
        return local >= start or local < end
    return False


def _override_decision(
    override: Optional[PreferenceOverride],
    channel: ChannelType,
    priority: Optional[NotificationPriority] = None,
) -> Optional[bool]:
    """Decision of one override level, or None to fall through."""
    if override is None:
        return None
    if override.enabled is False:
        return False

    if priority is not None:
        priority_override = override.priority_overrides.get(priority)
        if priority_override is not None:
            if priority_override.enabled is False:
                return False
            if channel in priority_override.channels:
                return priority_override.channels[channel]

    if channel in override.channels:
        return override.channels[channel]
    return None


def _evaluate(
    preference: NotificationPreference,
    category: str,
    type: str,
    channel: ChannelType,
    priority: NotificationPriority,
    template_name: Optional[str],
    now: Optional[datetime],
) -> bool:
    if not preference.enabled:
        return False

    if (
        channel != ChannelType.IN_APP
        and priority != NotificationPriority.URGENT
        and in_quiet_hours(preference.quiet_hours, now)
    ):
        return False

    overrides = preference.overrides
    levels = (
        (overrides.templates.get(template_name) if template_name else None, None),
        (overrides.types.get(type), None),
        (overrides.categories.get(category), priority),
    )
    for override, level_priority in levels:
        decision = _override_decision(override, channel, level_priority)
        if decision is not None:
            return decision

    channel_preference = preference.channels.for_channel(channel)
    return bool(channel_preference is not None and channel_preference.enabled)


def is_enabled(
    preference: Optional[NotificationPreference],
    category: str,
    type: str,
    channel: ChannelType,
    priority: NotificationPriority = NotificationPriority.NORMAL,
    template_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Decide whether delivery is allowed.

    Args:
        preference: The user's preference record, or None if they have none
        category: Notification category
        type: Notification type
        channel: Delivery channel
        priority: Notification priority
        template_name: Originating template, if any
        now: Evaluation time (defaults to the current UTC time)

    Returns:
        True if the notification may be delivered
    """
    if preference is None:
        return True
    try:
        return _evaluate(
            preference, category, type, channel, priority, template_name, now
        )
    except Exception as e:  # pylint: disable=broad-except
        logger.warning(
            "preference_evaluation_failed",
            user_id=preference.user_id,
            channel=channel.value,
            error=str(e),
        )
        return True


def get_delivery_settings(
    preference: Optional[NotificationPreference],
    channel: ChannelType,
    category: Optional[str] = None,
    type: Optional[str] = None,
) -> DeliverySettings:
    """Destination details for `channel` from a user's preferences.

    Email frequency resolves from the category override, then the type
    override, then the email channel setting. Only active push tokens and
    webhook endpoints are returned.
    """
    if preference is None:
        return DeliverySettings(channel=channel)

    channels = preference.channels
    if channel == ChannelType.EMAIL:
        overrides = preference.overrides
        frequency: Optional[EmailFrequency] = None
        for override in (
            overrides.categories.get(category) if category else None,
            overrides.types.get(type) if type else None,
        ):
            if override is not None and override.frequency is not None:
                frequency = override.frequency
                break
        return DeliverySettings(
            channel=channel,
            email_address=channels.email.address,
            email_frequency=frequency or channels.email.frequency,
        )
    if channel == ChannelType.SMS:
        return DeliverySettings(channel=channel, phone_number=channels.sms.phone_number)
    if channel == ChannelType.PUSH:
        return DeliverySettings(
            channel=channel,
            push_tokens=[t for t in channels.push.tokens if t.active],
        )
    if channel == ChannelType.WEBHOOK:
        return DeliverySettings(
            channel=channel,
            webhook_endpoints=[e for e in channels.webhook.endpoints if e.active],
        )
    return DeliverySettings(channel=channel)
