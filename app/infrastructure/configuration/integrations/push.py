"""Push provider integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class PushSettings(IntegrationSettings):
    """Process-wide defaults for push channel providers.

    Environment Variables:
        FCM_API_BASE_URL: Firebase Cloud Messaging HTTP v1 base URL
        FCM_OAUTH_SCOPE: OAuth scope requested for FCM service accounts
        PUSH_HTTP_TIMEOUT_SECONDS: Timeout for push provider HTTP calls
        WEB_PUSH_TTL_SECONDS: TTL passed to web push services
        WEB_PUSH_DEFAULT_ICON: Icon used when a web push payload has none
    """

    FCM_API_BASE_URL: str = Field(
        default="https://fcm.googleapis.com/v1",
        alias="FCM_API_BASE_URL",
    )
    FCM_OAUTH_SCOPE: str = Field(
        default="https://www.googleapis.com/auth/firebase.messaging",
        alias="FCM_OAUTH_SCOPE",
    )
    PUSH_HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        alias="PUSH_HTTP_TIMEOUT_SECONDS",
    )
    WEB_PUSH_TTL_SECONDS: int = Field(
        default=86400,
        alias="WEB_PUSH_TTL_SECONDS",
        description="Time-to-live for web push messages (seconds)",
    )
    WEB_PUSH_DEFAULT_ICON: str = Field(
        default="/icons/icon-192x192.png",
        alias="WEB_PUSH_DEFAULT_ICON",
    )
