"""Infrastructure modules for the notification engine.

Centralized infrastructure components:
- configuration: Settings management (Settings, RetrySettings)
- logging: Structured logging (get_module_logger, bind_request_context)
- models: Base models and API response envelopes
- notifications: Channel adapters, provider clients and the channel registry
- operations: Operation results and error classification
- persistence: Record stores and pagination
- resilience: Retry policy for provider calls
- services: Dependency injection services (SettingsDep, get_settings)
"""

# Configuration
from infrastructure.configuration import Settings

# Logging
from infrastructure.logging import get_module_logger

# Operations
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

# Dependency Injection Services
from infrastructure.services import (
    SettingsDep,
    ChannelRegistryDep,
    get_settings,
    get_channel_registry,
)

__all__ = [
    # Configuration
    "Settings",
    # Logging
    "get_module_logger",
    # Operations
    "OperationResult",
    "OperationStatus",
    # Dependency Injection Services
    "SettingsDep",
    "ChannelRegistryDep",
    "get_settings",
    "get_channel_registry",
]
