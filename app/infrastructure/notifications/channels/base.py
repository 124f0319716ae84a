"""Channel adapter abstract base class.

All channel adapters (in-app, email, SMS, push, webhook) implement this
interface. The channel registry owns client construction and caching; an
adapter only knows how to build a client from a channel record and how to
deliver one notification through it.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import (
    ChannelConfig,
    ChannelType,
    DeliveryOutcome,
    DeliverySettings,
    OutboundNotification,
)

logger = get_module_logger()


class ChannelAdapter(ABC):
    """Abstract base class for channel adapters.

    Each adapter handles delivery through one medium:
    - InAppAdapter: confirms immediately, the record itself is the delivery
    - EmailAdapter: SMTP / SendGrid / Mailgun / SES
    - SmsAdapter: Twilio / SNS / Nexmo
    - PushAdapter: FCM and web push
    - WebhookAdapter: signed HTTP POST with retry

    Example Implementation:
        class FaxAdapter(ChannelAdapter):
            channel_type = ChannelType.CUSTOM

            def build_client(self, channel):
                return FaxClient(**channel.config["fax"])

            def deliver(self, client, channel, notification, delivery_settings):
                number = delivery_settings.phone_number
                result = client.send(number, notification.message)
                if not result.is_success:
                    return DeliveryOutcome.failed(result.message)
                return DeliveryOutcome(success=True, message_id=result.data["id"])
    """

    channel_type: ChannelType

    # In-app delivery has no provider and works without a channel record
    requires_channel: bool = True

    @abstractmethod
    def build_client(self, channel: ChannelConfig) -> Any:
        """Build the provider client described by a channel record.

        Raises:
            ValueError: Unsupported provider or invalid configuration
        """

    @abstractmethod
    def deliver(
        self,
        client: Any,
        channel: Optional[ChannelConfig],
        notification: OutboundNotification,
        delivery_settings: DeliverySettings,
    ) -> DeliveryOutcome:
        """Deliver one notification through an initialized client."""

    def send(
        self,
        client: Any,
        channel: Optional[ChannelConfig],
        notification: OutboundNotification,
        delivery_settings: DeliverySettings,
    ) -> DeliveryOutcome:
        """Deliver and convert any unexpected exception into a failed outcome.

        Callers can rely on this never raising.
        """
        try:
            return self.deliver(client, channel, notification, delivery_settings)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "channel_delivery_error",
                channel_type=self.channel_type.value,
                channel_name=channel.name if channel else None,
                notification_id=notification.id,
                error=str(e),
                exc_info=True,
            )
            return DeliveryOutcome.failed(str(e) or type(e).__name__)
