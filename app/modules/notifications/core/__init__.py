"""Core services - notification orchestration and channel administration."""

from modules.notifications.core.channel_admin import ChannelAdminService
from modules.notifications.core.orchestrator import (
    NotificationOrchestrator,
    SendResult,
)

__all__ = [
    "ChannelAdminService",
    "NotificationOrchestrator",
    "SendResult",
]
