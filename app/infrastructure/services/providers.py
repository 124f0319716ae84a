"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache

from infrastructure.configuration import Settings
from infrastructure.notifications import (
    ChannelConfig,
    ChannelRegistry,
    ChannelType,
    EmailAdapter,
    InAppAdapter,
    PushAdapter,
    SmsAdapter,
    WebhookAdapter,
)
from infrastructure.persistence import InMemoryRecordStore


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process,
    even if called from multiple packages.

    Infrastructure packages should use this directly to ensure singleton consistency:
        from infrastructure.services.providers import get_settings
        settings = get_settings()

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/config")
        def get_config(settings: SettingsDep):
            return settings.dict()

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_channel_store() -> InMemoryRecordStore[ChannelConfig]:
    """
    Get application-scoped channel record store.

    Returns:
        InMemoryRecordStore holding ChannelConfig records.
    """
    return InMemoryRecordStore(ChannelConfig, name="channels")


@lru_cache
def get_channel_registry() -> ChannelRegistry:
    """
    Get application-scoped channel registry singleton.

    The registry owns the provider client cache, so exactly one instance
    must exist per process.

    Returns:
        ChannelRegistry: Registry with one adapter per deliverable channel type.

    Usage:
        @router.post("/send")
        def send(registry: ChannelRegistryDep):
            outcome = registry.send_notification(ChannelType.SMS, n, settings)
    """
    settings = get_settings()
    adapters = {
        ChannelType.IN_APP: InAppAdapter(),
        ChannelType.EMAIL: EmailAdapter(settings.email),
        ChannelType.SMS: SmsAdapter(settings.sms),
        ChannelType.PUSH: PushAdapter(settings.push),
        ChannelType.WEBHOOK: WebhookAdapter(settings.webhook, settings.retry),
    }
    return ChannelRegistry(get_channel_store(), adapters)
