"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common infrastructure dependencies.
"""

from typing import Annotated
from fastapi import Depends
from infrastructure.configuration import Settings
from infrastructure.notifications import ChannelRegistry
from infrastructure.services.providers import (
    get_settings,
    get_channel_registry,
)

# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Channel registry dependency - shared provider client cache
ChannelRegistryDep = Annotated[ChannelRegistry, Depends(get_channel_registry)]

__all__ = [
    "SettingsDep",
    "ChannelRegistryDep",
]
