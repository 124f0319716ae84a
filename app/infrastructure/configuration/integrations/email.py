"""Email provider integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class EmailSettings(IntegrationSettings):
    """Process-wide defaults for email channel providers.

    Environment Variables:
        EMAIL_DEFAULT_FROM: Sender used when a channel config has no default_from
        EMAIL_DEFAULT_REPLY_TO: Reply-To used when a channel config has none
        EMAIL_HTTP_TIMEOUT_SECONDS: Timeout for HTTP-based providers (SendGrid, Mailgun)
        EMAIL_SMTP_TIMEOUT_SECONDS: Socket timeout for SMTP connections
        SENDGRID_API_URL: SendGrid v3 mail send endpoint
        MAILGUN_API_BASE_URL: Mailgun API base URL (regional endpoints differ)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        sender = settings.email.EMAIL_DEFAULT_FROM
        ```
    """

    EMAIL_DEFAULT_FROM: str = Field(
        default="notifications@example.com",
        alias="EMAIL_DEFAULT_FROM",
        description="Default sender address for outbound email",
    )
    EMAIL_DEFAULT_REPLY_TO: str | None = Field(
        default=None,
        alias="EMAIL_DEFAULT_REPLY_TO",
        description="Default Reply-To address for outbound email",
    )
    EMAIL_HTTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        alias="EMAIL_HTTP_TIMEOUT_SECONDS",
        description="Timeout for HTTP email provider calls (seconds)",
    )
    EMAIL_SMTP_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        alias="EMAIL_SMTP_TIMEOUT_SECONDS",
        description="Socket timeout for SMTP connections (seconds)",
    )
    SENDGRID_API_URL: str = Field(
        default="https://api.sendgrid.com/v3/mail/send",
        alias="SENDGRID_API_URL",
    )
    MAILGUN_API_BASE_URL: str = Field(
        default="https://api.mailgun.net/v3",
        alias="MAILGUN_API_BASE_URL",
    )
