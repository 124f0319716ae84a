"""Integration settings __init__ - exports all provider settings."""

from infrastructure.configuration.integrations.email import EmailSettings
from infrastructure.configuration.integrations.push import PushSettings
from infrastructure.configuration.integrations.sms import SmsSettings

__all__ = [
    "EmailSettings",
    "PushSettings",
    "SmsSettings",
]
