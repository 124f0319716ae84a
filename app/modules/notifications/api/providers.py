"""Application-scoped providers for the notification services."""

from functools import lru_cache

from infrastructure.persistence import InMemoryRecordStore
from infrastructure.services import (
    get_channel_registry,
    get_channel_store,
    get_settings,
)
from modules.notifications.core import ChannelAdminService, NotificationOrchestrator
from modules.notifications.domain.models import (
    Notification,
    NotificationPreference,
    NotificationTemplate,
)
from modules.notifications.preferences import PreferenceService
from modules.notifications.templates import TemplateService


@lru_cache
def get_notification_store() -> InMemoryRecordStore[Notification]:
    return InMemoryRecordStore(Notification, name="notifications")


@lru_cache
def get_template_service() -> TemplateService:
    return TemplateService(
        InMemoryRecordStore(NotificationTemplate, name="templates")
    )


@lru_cache
def get_preference_service() -> PreferenceService:
    return PreferenceService(
        InMemoryRecordStore(NotificationPreference, name="preferences")
    )


@lru_cache
def get_channel_admin_service() -> ChannelAdminService:
    return ChannelAdminService(get_channel_store(), get_channel_registry())


@lru_cache
def get_notification_orchestrator() -> NotificationOrchestrator:
    """
    Get application-scoped orchestrator singleton.

    Dispatch concurrency, sweep limits and template strictness come from
    `settings.dispatch`.
    """
    dispatch = get_settings().dispatch
    return NotificationOrchestrator(
        store=get_notification_store(),
        templates=get_template_service(),
        preferences=get_preference_service(),
        registry=get_channel_registry(),
        channel_store=get_channel_store(),
        max_workers=dispatch.max_workers,
        sweep_limit=dispatch.sweep_limit,
        strict_template_variables=dispatch.strict_template_variables,
    )
