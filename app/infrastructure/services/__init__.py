"""
Dependency injection services.

Provides type aliases and provider functions for FastAPI dependency injection.
"""

from infrastructure.services.dependencies import (
    SettingsDep,
    ChannelRegistryDep,
)
from infrastructure.services.providers import (
    get_settings,
    get_channel_store,
    get_channel_registry,
)

__all__ = [
    "SettingsDep",
    "ChannelRegistryDep",
    "get_settings",
    "get_channel_store",
    "get_channel_registry",
]
