"""Notification engine configuration settings - main aggregator."""

# Integration settings
from infrastructure.configuration.integrations import (
    EmailSettings,
    PushSettings,
    SmsSettings,
)

# Infrastructure settings
from infrastructure.configuration.infrastructure import (
    DispatchSettings,
    RetrySettings,
    ServerSettings,
    WebhookSettings,
)

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Notification engine configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object.
    Settings are organized by concern:

    - **Integrations**: Provider defaults for email, SMS and push delivery
    - **Infrastructure**: Dispatch, retry, webhook and server behavior

    Environment Variables:
        PREFIX: Environment prefix for multi-tenant deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        sender = settings.email.EMAIL_DEFAULT_FROM
        workers = settings.dispatch.max_workers

        if settings.is_production:
            # Production-specific logic...
        ```
    """

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    # Integration settings
    email: EmailSettings
    sms: SmsSettings
    push: PushSettings

    # Infrastructure settings
    server: ServerSettings
    dispatch: DispatchSettings
    retry: RetrySettings
    webhook: WebhookSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            # Integrations
            "email": EmailSettings,
            "sms": SmsSettings,
            "push": PushSettings,
            # Infrastructure
            "server": ServerSettings,
            "dispatch": DispatchSettings,
            "retry": RetrySettings,
            "webhook": WebhookSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)
