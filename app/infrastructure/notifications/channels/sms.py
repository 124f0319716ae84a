"""SMS channel adapter."""

from typing import Optional, TYPE_CHECKING

from infrastructure.notifications.channels.base import ChannelAdapter
from infrastructure.notifications.models import (
    ChannelConfig,
    ChannelType,
    DeliveryOutcome,
    DeliverySettings,
    OutboundNotification,
)
from infrastructure.notifications.providers.sms import SmsProvider, build_sms_provider

if TYPE_CHECKING:
    from infrastructure.configuration.integrations import SmsSettings


def compose_sms_body(notification: OutboundNotification, max_length: int = 160) -> str:
    """Build the SMS text.

    Uses `data.sms.text` when present, else the message. The title is
    prefixed unless the body already contains it, and the result is cut to
    `max_length` characters with a trailing ellipsis.
    """
    body = notification.channel_payload("sms").get("text") or notification.message
    if notification.title and notification.title not in body:
        body = f"{notification.title}: {body}"
    if len(body) > max_length:
        body = body[: max_length - 3] + "..."
    return body


class SmsAdapter(ChannelAdapter):
    channel_type = ChannelType.SMS

    def __init__(self, settings: "SmsSettings"):
        self.settings = settings

    def build_client(self, channel: ChannelConfig) -> SmsProvider:
        return build_sms_provider(channel.provider, channel.config, self.settings)

    def deliver(
        self,
        client: SmsProvider,
        channel: Optional[ChannelConfig],
        notification: OutboundNotification,
        delivery_settings: DeliverySettings,
    ) -> DeliveryOutcome:
        if not delivery_settings.phone_number:
            return DeliveryOutcome.failed("No phone number available for recipient")

        body = compose_sms_body(notification, self.settings.SMS_MAX_LENGTH)
        result = client.send(delivery_settings.phone_number, body)
        if not result.is_success:
            return DeliveryOutcome.failed(
                result.message, details={"error_code": result.error_code}
            )
        return DeliveryOutcome(
            success=True, message_id=(result.data or {}).get("message_id")
        )
