"""Notification dispatch and sweep settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class DispatchSettings(InfrastructureSettings):
    """Dispatch concurrency, sweep bounds and scheduler configuration.

    Environment Variables:
        NOTIFICATION_DISPATCH_MAX_WORKERS: Worker threads per batch or sweep (default: 8)
        NOTIFICATION_SWEEP_LIMIT: Default records per sweep invocation (default: 100)
        NOTIFICATION_STRICT_TEMPLATE_VARIABLES: Reject sends missing required
            template variables instead of rendering leniently (default: False)
        NOTIFICATION_SCHEDULER_ENABLED: Run sweeps on a background thread (default: False)
        NOTIFICATION_SCHEDULED_SWEEP_SECONDS: Interval for the scheduled sweep (default: 60)
        NOTIFICATION_EXPIRED_SWEEP_SECONDS: Interval for the expiry sweep (default: 3600)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        workers = settings.dispatch.max_workers
        ```
    """

    max_workers: int = Field(
        default=8,
        alias="NOTIFICATION_DISPATCH_MAX_WORKERS",
        description="Worker threads used by batch send and sweeps",
    )
    sweep_limit: int = Field(
        default=100,
        alias="NOTIFICATION_SWEEP_LIMIT",
        description="Default number of records handled per sweep",
    )
    strict_template_variables: bool = Field(
        default=False,
        alias="NOTIFICATION_STRICT_TEMPLATE_VARIABLES",
        description="Abort sends whose template variables fail validation",
    )
    scheduler_enabled: bool = Field(
        default=False,
        alias="NOTIFICATION_SCHEDULER_ENABLED",
    )
    scheduled_sweep_seconds: int = Field(
        default=60,
        alias="NOTIFICATION_SCHEDULED_SWEEP_SECONDS",
    )
    expired_sweep_seconds: int = Field(
        default=3600,
        alias="NOTIFICATION_EXPIRED_SWEEP_SECONDS",
    )
