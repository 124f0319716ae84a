"""Channel registry.

Resolves a channel type (and optional channel name) to an administrator
managed channel record and a ready provider client, then hands the send to
the matching adapter. Provider clients are built lazily on first use and
cached by channel name.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import ChannelAdapter
from infrastructure.notifications.models import (
    ChannelConfig,
    ChannelStatus,
    ChannelType,
    DeliveryOutcome,
    DeliverySettings,
    OutboundNotification,
)
from infrastructure.operations import OperationResult
from infrastructure.persistence import RecordStore

logger = get_module_logger()


class ChannelRegistry:
    """Lazily initialized, thread-safe cache of channel provider clients.

    Attributes:
        channel_store: Store holding ChannelConfig records
        adapters: Adapter per channel type; types without an adapter
            (e.g. `custom`) cannot be sent to

    Example:
        registry = ChannelRegistry(channel_store, adapters)
        outcome = registry.send_notification(
            ChannelType.EMAIL, notification, delivery_settings
        )
        if not outcome.success:
            logger.warning("delivery_failed", error=outcome.error)
    """

    def __init__(
        self,
        channel_store: RecordStore[ChannelConfig],
        adapters: Mapping[ChannelType, ChannelAdapter],
    ):
        self.channel_store = channel_store
        self.adapters: Dict[ChannelType, ChannelAdapter] = dict(adapters)
        self._clients: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def get_adapter(self, channel_type: ChannelType) -> Optional[ChannelAdapter]:
        return self.adapters.get(channel_type)

    def is_initialized(self, channel_name: str) -> bool:
        return channel_name in self._clients

    def initialize_channel(self, channel: ChannelConfig) -> OperationResult:
        """Build and cache the provider client for `channel`.

        On failure the channel record is marked `error` with the failure
        message and a permanent error result is returned.

        Returns:
            OperationResult with the client in `data["client"]` on success
        """
        client = self._clients.get(channel.name)
        if client is not None:
            return OperationResult.success(data={"client": client})

        adapter = self.get_adapter(channel.type)
        if adapter is None:
            return OperationResult.permanent_error(
                f"Unsupported channel type: {channel.type.value}",
                error_code="UNSUPPORTED_CHANNEL_TYPE",
            )

        with self._lock:
            client = self._clients.get(channel.name)
            if client is not None:
                return OperationResult.success(data={"client": client})
            try:
                client = adapter.build_client(channel)
            except Exception as e:  # pylint: disable=broad-except
                message = str(e) or type(e).__name__
                logger.error(
                    "channel_initialization_failed",
                    channel_name=channel.name,
                    channel_type=channel.type.value,
                    provider=channel.provider,
                    error=message,
                )
                self._mark_error(channel, message)
                return OperationResult.permanent_error(
                    message, error_code="CHANNEL_INITIALIZATION_FAILED"
                )
            self._clients[channel.name] = client

        logger.info(
            "channel_initialized",
            channel_name=channel.name,
            channel_type=channel.type.value,
            provider=channel.provider,
        )
        return OperationResult.success(data={"client": client})

    def invalidate(self, channel_name: Optional[str] = None) -> None:
        """Drop the cached client for `channel_name`, or every client."""
        with self._lock:
            if channel_name is None:
                self._clients.clear()
            else:
                self._clients.pop(channel_name, None)

    def active_channels(self, channel_type: ChannelType) -> List[ChannelConfig]:
        return self.channel_store.find(
            where={"type": channel_type, "status": ChannelStatus.ACTIVE},
            sort_by="created_at",
        )

    def resolve_channel(
        self, channel_type: ChannelType, channel_name: Optional[str] = None
    ) -> Optional[ChannelConfig]:
        """Pick the channel record to send through.

        A named channel must exist, match the type and be active. Without a
        name every active channel of the type is initialized and the one
        tagged `default` wins, else the first one that initialized.
        """
        if channel_name:
            matches = self.channel_store.find(
                where={"name": channel_name, "type": channel_type}
            )
            if not matches or not matches[0].is_active:
                return None
            channel = matches[0]
            return channel if self.initialize_channel(channel).is_success else None

        ready = [
            channel
            for channel in self.active_channels(channel_type)
            if self.initialize_channel(channel).is_success
        ]
        if not ready:
            return None
        return next((c for c in ready if c.is_default), ready[0])

    def send_notification(
        self,
        channel_type: ChannelType,
        notification: OutboundNotification,
        delivery_settings: DeliverySettings,
        channel_name: Optional[str] = None,
    ) -> DeliveryOutcome:
        """Send one notification through the resolved channel. Never raises."""
        adapter = self.get_adapter(channel_type)
        if adapter is None:
            return DeliveryOutcome.failed(
                f"Unsupported channel type: {channel_type.value}"
            )

        if not adapter.requires_channel and not channel_name:
            return adapter.send(None, None, notification, delivery_settings)

        channel = self.resolve_channel(channel_type, channel_name)
        if channel is None:
            if channel_name:
                error = f"Channel '{channel_name}' is not available"
            else:
                error = f"No {channel_type.value} channel available"
            logger.warning(
                "channel_unavailable",
                channel_type=channel_type.value,
                channel_name=channel_name,
                notification_id=notification.id,
            )
            return DeliveryOutcome.failed(error)

        init_result = self.initialize_channel(channel)
        if not init_result.is_success:
            return DeliveryOutcome.failed(
                init_result.message, channel_name=channel.name
            )
        client = init_result.data["client"]
        outcome = adapter.send(client, channel, notification, delivery_settings)
        return outcome.model_copy(update={"channel_name": channel.name})

    def _mark_error(self, channel: ChannelConfig, message: str) -> None:
        if not channel.id:
            return
        self.channel_store.update(
            channel.id,
            {
                "status": ChannelStatus.ERROR,
                "error_message": message,
                "updated_at": datetime.now(timezone.utc),
            },
        )
