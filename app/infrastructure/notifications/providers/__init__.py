"""Provider clients for the email, SMS and push channels."""

from infrastructure.notifications.providers.email import (
    EmailMessage,
    EmailProvider,
    MailgunEmailProvider,
    SendGridEmailProvider,
    SesEmailProvider,
    SmtpEmailProvider,
    build_email_provider,
)
from infrastructure.notifications.providers.push import (
    FcmPushProvider,
    PushClients,
    PushMessage,
    WebPushProvider,
    build_push_clients,
)
from infrastructure.notifications.providers.sms import (
    NexmoSmsProvider,
    SmsProvider,
    SnsSmsProvider,
    TwilioSmsProvider,
    build_sms_provider,
)

__all__ = [
    # Email
    "EmailMessage",
    "EmailProvider",
    "SmtpEmailProvider",
    "SendGridEmailProvider",
    "MailgunEmailProvider",
    "SesEmailProvider",
    "build_email_provider",
    # SMS
    "SmsProvider",
    "TwilioSmsProvider",
    "SnsSmsProvider",
    "NexmoSmsProvider",
    "build_sms_provider",
    # Push
    "PushMessage",
    "PushClients",
    "FcmPushProvider",
    "WebPushProvider",
    "build_push_clients",
]
