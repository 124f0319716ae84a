"""SMS provider integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class SmsSettings(IntegrationSettings):
    """Process-wide defaults for SMS channel providers.

    Environment Variables:
        SMS_MAX_LENGTH: Character budget for a single SMS body (default: 160)
        SMS_HTTP_TIMEOUT_SECONDS: Timeout for HTTP-based providers (Nexmo)
        NEXMO_API_URL: Nexmo/Vonage SMS endpoint
    """

    SMS_MAX_LENGTH: int = Field(
        default=160,
        alias="SMS_MAX_LENGTH",
        description="Maximum SMS body length before truncation",
    )
    SMS_HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        alias="SMS_HTTP_TIMEOUT_SECONDS",
    )
    NEXMO_API_URL: str = Field(
        default="https://rest.nexmo.com/sms/json",
        alias="NEXMO_API_URL",
    )
