"""Type aliases for the notification services."""

from typing import Annotated

from fastapi import Depends

from modules.notifications.api.providers import (
    get_channel_admin_service,
    get_notification_orchestrator,
    get_preference_service,
    get_template_service,
)
from modules.notifications.core import ChannelAdminService, NotificationOrchestrator
from modules.notifications.preferences import PreferenceService
from modules.notifications.templates import TemplateService

OrchestratorDep = Annotated[
    NotificationOrchestrator, Depends(get_notification_orchestrator)
]
TemplateServiceDep = Annotated[TemplateService, Depends(get_template_service)]
PreferenceServiceDep = Annotated[PreferenceService, Depends(get_preference_service)]
ChannelAdminDep = Annotated[ChannelAdminService, Depends(get_channel_admin_service)]

__all__ = [
    "OrchestratorDep",
    "TemplateServiceDep",
    "PreferenceServiceDep",
    "ChannelAdminDep",
]
