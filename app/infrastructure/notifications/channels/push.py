"""Push channel adapter."""

from collections import defaultdict
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import ChannelAdapter
from infrastructure.notifications.models import (
    ChannelConfig,
    ChannelType,
    DeliveryOutcome,
    DeliverySettings,
    OutboundNotification,
    PushPlatform,
)
from infrastructure.notifications.providers.push import (
    PushClients,
    PushMessage,
    build_push_clients,
)
from infrastructure.operations import OperationResult

if TYPE_CHECKING:
    from infrastructure.configuration.integrations import PushSettings

logger = get_module_logger()


def build_push_message(notification: OutboundNotification) -> PushMessage:
    content = notification.channel_payload("push")
    data = {
        "notification_id": notification.id,
        "type": notification.type,
        "category": notification.category,
    }
    extra = content.get("data")
    if isinstance(extra, dict):
        data.update({key: str(value) for key, value in extra.items()})
    primary = next((a for a in notification.actions if a.is_primary), None)
    return PushMessage(
        title=content.get("title") or notification.title,
        body=content.get("body") or notification.message,
        data=data,
        icon=content.get("icon"),
        link=primary.url if primary else content.get("link"),
        priority=notification.priority,
    )


class PushAdapter(ChannelAdapter):
    """Delivers to every active push token of the recipient.

    Android and iOS tokens go through FCM. Web tokens go through the web
    push provider when the channel configures one, otherwise through FCM
    with webpush fields. Per-token results are aggregated into one outcome.
    """

    channel_type = ChannelType.PUSH

    def __init__(self, settings: "PushSettings"):
        self.settings = settings

    def build_client(self, channel: ChannelConfig) -> PushClients:
        return build_push_clients(channel.provider, channel.config, self.settings)

    def _send_group(
        self,
        clients: PushClients,
        platform: PushPlatform,
        tokens: List[str],
        message: PushMessage,
    ) -> List[tuple]:
        if platform == PushPlatform.WEB and clients.web_push is not None:
            return [(token, clients.web_push.send(token, message)) for token in tokens]
        if clients.fcm is not None:
            return clients.fcm.send_multicast(tokens, message, platform)
        error = OperationResult.permanent_error(
            f"No provider configured for {platform.value} push",
            error_code="PROVIDER_NOT_CONFIGURED",
        )
        return [(token, error) for token in tokens]

    def deliver(
        self,
        client: PushClients,
        channel: Optional[ChannelConfig],
        notification: OutboundNotification,
        delivery_settings: DeliverySettings,
    ) -> DeliveryOutcome:
        tokens = [t for t in delivery_settings.push_tokens if t.active]
        if not tokens:
            return DeliveryOutcome.failed("No push tokens provided")

        by_platform: Dict[PushPlatform, List[str]] = defaultdict(list)
        for token in tokens:
            by_platform[token.platform].append(token.token)

        message = build_push_message(notification)
        sent = 0
        failed = 0
        message_ids: List[str] = []
        errors: List[Dict[str, Any]] = []

        for platform, platform_tokens in by_platform.items():
            for token, result in self._send_group(
                client, platform, platform_tokens, message
            ):
                if result.is_success:
                    sent += 1
                    message_id = (result.data or {}).get("message_id")
                    if message_id:
                        message_ids.append(message_id)
                else:
                    failed += 1
                    errors.append({"token": token, "error": result.message})

        logger.info(
            "push_notification_sent",
            notification_id=notification.id,
            sent=sent,
            failed=failed,
        )

        success = failed == 0 or sent > 0
        return DeliveryOutcome(
            success=success,
            message_id=message_ids[0] if message_ids else None,
            message_ids=message_ids,
            error=None if success else errors[0]["error"],
            details={"sent": sent, "failed": failed, "errors": errors},
        )
