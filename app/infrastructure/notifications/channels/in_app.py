"""In-app channel: the stored notification is the delivery."""

from datetime import datetime, timezone
from typing import Any, Optional

from infrastructure.notifications.channels.base import ChannelAdapter
from infrastructure.notifications.models import (
    ChannelConfig,
    ChannelType,
    DeliveryOutcome,
    DeliverySettings,
    OutboundNotification,
)


class InAppAdapter(ChannelAdapter):
    channel_type = ChannelType.IN_APP
    requires_channel = False

    def build_client(self, channel: ChannelConfig) -> Any:
        return None

    def deliver(
        self,
        client: Any,
        channel: Optional[ChannelConfig],
        notification: OutboundNotification,
        delivery_settings: DeliverySettings,
    ) -> DeliveryOutcome:
        return DeliveryOutcome(
            success=True,
            message_id=notification.id,
            delivered_at=datetime.now(timezone.utc),
        )
