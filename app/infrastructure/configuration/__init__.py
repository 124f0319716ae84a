"""Infrastructure configuration module - public API.

Centralized configuration for the notification engine using Pydantic
BaseSettings with domain-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)
    RetrySettings: Delivery retry settings class (for testing)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    timeout = settings.webhook.WEBHOOK_TIMEOUT_SECONDS
    retry_enabled = settings.retry.enabled
    ```
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.infrastructure.retry import RetrySettings

__all__ = ["Settings", "RetrySettings"]
