"""Email channel adapter."""

import html
from typing import Any, Optional, TYPE_CHECKING

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import ChannelAdapter
from infrastructure.notifications.models import (
    ChannelConfig,
    ChannelType,
    DeliveryOutcome,
    DeliverySettings,
    EmailFrequency,
    OutboundNotification,
)
from infrastructure.notifications.providers.email import (
    EmailMessage,
    EmailProvider,
    build_email_provider,
)

if TYPE_CHECKING:
    from infrastructure.configuration.integrations import EmailSettings

logger = get_module_logger()


def text_to_html(text: str) -> str:
    """Escape plain text and turn newlines into `<br>` tags."""
    return html.escape(text).replace("\n", "<br>")


class EmailAdapter(ChannelAdapter):
    """Delivers notifications as email through the channel's provider.

    Recipients whose email frequency is anything other than `immediate` are
    acknowledged with a queued outcome; nothing is sent.
    """

    channel_type = ChannelType.EMAIL

    def __init__(self, settings: "EmailSettings"):
        self.settings = settings

    def build_client(self, channel: ChannelConfig) -> EmailProvider:
        return build_email_provider(channel.provider, channel.config, self.settings)

    def deliver(
        self,
        client: EmailProvider,
        channel: Optional[ChannelConfig],
        notification: OutboundNotification,
        delivery_settings: DeliverySettings,
    ) -> DeliveryOutcome:
        if not delivery_settings.email_address:
            return DeliveryOutcome.failed("No email address available for recipient")

        if delivery_settings.email_frequency != EmailFrequency.IMMEDIATE:
            logger.info(
                "email_queued",
                notification_id=notification.id,
                frequency=delivery_settings.email_frequency.value,
            )
            return DeliveryOutcome(
                success=True,
                queued=True,
                details={"frequency": delivery_settings.email_frequency.value},
            )

        content = notification.channel_payload("email")
        text_body = content.get("text_body") or notification.message
        config = channel.config if channel else {}
        message = EmailMessage(
            to=delivery_settings.email_address,
            subject=content.get("subject") or notification.title,
            text_body=text_body,
            html_body=content.get("html_body") or text_to_html(text_body),
            from_address=config.get("default_from") or self.settings.EMAIL_DEFAULT_FROM,
            reply_to=config.get("default_reply_to")
            or self.settings.EMAIL_DEFAULT_REPLY_TO,
        )

        result = client.send(message)
        if not result.is_success:
            return DeliveryOutcome.failed(
                result.message, details={"error_code": result.error_code}
            )
        return DeliveryOutcome(
            success=True, message_id=(result.data or {}).get("message_id")
        )
