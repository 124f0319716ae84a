"""HTTP surface of the notifications module."""

from modules.notifications.api.controllers import (
    channels_router,
    notifications_router,
    preferences_router,
    templates_router,
)

__all__ = [
    "channels_router",
    "notifications_router",
    "preferences_router",
    "templates_router",
]
