"""Shared base classes for settings modules."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class IntegrationSettings(BaseSettings):
    """Base class for delivery provider settings.

    Provider families (email, SMS, push) inherit from this class so every
    provider reads the same `.env` file with the same case rules. Per-channel
    credentials live on the stored channel records; these settings only carry
    process-wide defaults such as endpoints and timeouts.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


class InfrastructureSettings(BaseSettings):
    """Base class for infrastructure-level settings.

    Infrastructure settings control core engine behavior like dispatch
    concurrency, sweep scheduling, webhook delivery and the HTTP server.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )
