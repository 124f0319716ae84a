"""Channel adapter implementations."""

from infrastructure.notifications.channels.base import ChannelAdapter
from infrastructure.notifications.channels.email import EmailAdapter
from infrastructure.notifications.channels.in_app import InAppAdapter
from infrastructure.notifications.channels.push import PushAdapter
from infrastructure.notifications.channels.sms import SmsAdapter
from infrastructure.notifications.channels.webhook import WebhookAdapter

__all__ = [
    "ChannelAdapter",
    "InAppAdapter",
    "EmailAdapter",
    "SmsAdapter",
    "PushAdapter",
    "WebhookAdapter",
]
