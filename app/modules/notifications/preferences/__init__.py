"""Preference evaluation and administration."""

from modules.notifications.preferences.evaluator import (
    get_delivery_settings,
    in_quiet_hours,
    is_enabled,
)
from modules.notifications.preferences.service import PreferenceService, deep_merge

__all__ = [
    "PreferenceService",
    "deep_merge",
    "get_delivery_settings",
    "in_quiet_hours",
    "is_enabled",
]
