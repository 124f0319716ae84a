"""Server infrastructure settings."""

from typing import List

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class ServerSettings(InfrastructureSettings):
    """HTTP server runtime configuration.

    Environment Variables:
        BACKEND_URL: Backend API base URL (default: http://127.0.0.1:8000)
        CORS_ALLOW_ORIGINS: Origins allowed outside production
        SYSTEM_RATE_LIMIT: slowapi limit applied to the system endpoints

    Example:
        ```python
        from infrastructure.services import get_settings

        backend_url = get_settings().server.BACKEND_URL
        ```
    """

    BACKEND_URL: str = Field(default="http://127.0.0.1:8000", alias="BACKEND_URL")
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:8000", "http://127.0.0.1:8000"],
        alias="CORS_ALLOW_ORIGINS",
    )
    SYSTEM_RATE_LIMIT: str = Field(default="50/minute", alias="SYSTEM_RATE_LIMIT")
