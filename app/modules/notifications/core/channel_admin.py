"""Channel administration.

CRUD over ChannelConfig records plus test, set-as-default and statistics.
Any change to a channel drops its cached provider client so the next send
rebuilds it from the stored configuration.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from infrastructure.logging import get_module_logger
from infrastructure.models import PaginatedData
from infrastructure.notifications import (
    DEFAULT_TAG,
    ChannelConfig,
    ChannelRegistry,
    ChannelStatus,
    ChannelType,
    format_success_rate,
)
from infrastructure.persistence import DEFAULT_PAGE_SIZE, RecordStore, paginate
from modules.notifications.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
)

logger = get_module_logger()

PROTECTED_FIELDS = ("id", "stats", "created_at", "last_tested")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _validation_error(e: PydanticValidationError) -> ValidationError:
    return ValidationError(
        "Invalid channel data",
        details={"errors": e.errors(include_url=False, include_context=False)},
    )


class ChannelAdminService:
    """Administrative operations over channel records.

    At most one channel per type carries the `default` tag. Tagging a
    channel clears the tag from every other channel of its type first;
    the swap runs under a service lock.
    """

    def __init__(self, store: RecordStore[ChannelConfig], registry: ChannelRegistry):
        self.store = store
        self.registry = registry
        self._default_lock = threading.Lock()

    def _find_by_name(self, name: str) -> Optional[ChannelConfig]:
        matches = self.store.find(where={"name": name}, limit=1)
        return matches[0] if matches else None

    def _clear_default(self, channel_type: ChannelType, keep_id: Optional[str]) -> None:
        for other in self.store.find(where={"type": channel_type}):
            if other.id != keep_id and DEFAULT_TAG in other.tags:
                self.store.apply(
                    other.id,
                    lambda c: {
                        "tags": [t for t in c.tags if t != DEFAULT_TAG],
                        "updated_at": _now(),
                    },
                )

    def create_channel(self, data: Dict[str, Any]) -> ChannelConfig:
        payload = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
        now = _now()
        try:
            channel = ChannelConfig.model_validate(
                {**payload, "created_at": now, "updated_at": now}
            )
        except PydanticValidationError as e:
            raise _validation_error(e) from e

        with self._default_lock:
            if self._find_by_name(channel.name) is not None:
                raise ConflictError(
                    f"Channel with name '{channel.name}' already exists"
                )
            created = self.store.create(channel)
            if created.is_default:
                self._clear_default(created.type, keep_id=created.id)

        logger.info(
            "channel_created",
            channel_name=created.name,
            channel_type=created.type.value,
            provider=created.provider,
        )
        return created

    def get_channel(self, id_or_name: str) -> ChannelConfig:
        channel = self.store.get(id_or_name) or self._find_by_name(id_or_name)
        if channel is None:
            raise NotFoundError(f"Channel not found: {id_or_name}")
        return channel

    def list_channels(
        self,
        type: Optional[ChannelType] = None,
        status: Optional[ChannelStatus] = None,
        provider: Optional[str] = None,
        tag: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> PaginatedData:
        where: Dict[str, Any] = {}
        if type is not None:
            where["type"] = type
        if status is not None:
            where["status"] = status
        if provider:
            where["provider"] = provider
        predicate = (lambda c: tag in c.tags) if tag else None
        return paginate(
            self.store, where=where, predicate=predicate, page=page, limit=limit
        )

    def update_channel(self, id_or_name: str, changes: Dict[str, Any]) -> ChannelConfig:
        current = self.get_channel(id_or_name)
        changes = {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}

        with self._default_lock:
            new_name = changes.get("name")
            if new_name and new_name != current.name and self._find_by_name(new_name):
                raise ConflictError(f"Channel with name '{new_name}' already exists")
            try:
                updated = self.store.update(
                    current.id, {**changes, "updated_at": _now()}
                )
            except PydanticValidationError as e:
                raise _validation_error(e) from e
            if updated is None:
                raise NotFoundError(f"Channel not found: {id_or_name}")
            if updated.is_default:
                self._clear_default(updated.type, keep_id=updated.id)

        self.registry.invalidate(current.name)
        self.registry.invalidate(updated.name)
        logger.info("channel_updated", channel_name=updated.name)
        return updated

    def delete_channel(self, id_or_name: str) -> None:
        channel = self.get_channel(id_or_name)
        if not self.store.delete(channel.id):
            raise NotFoundError(f"Channel not found: {id_or_name}")
        self.registry.invalidate(channel.name)
        logger.info("channel_deleted", channel_name=channel.name)

    def test_channel(self, id_or_name: str) -> Dict[str, Any]:
        """Rebuild the channel's provider client and check it.

        Providers with a connectivity check (e.g. SMTP) run it. The record
        ends up `active` on success or `error` with the failure message;
        `last_tested` is stamped either way.
        """
        channel = self.get_channel(id_or_name)
        self.registry.invalidate(channel.name)
        result = self.registry.initialize_channel(channel)

        if result.is_success:
            client = result.data["client"]
            verify = getattr(client, "verify", None)
            if callable(verify):
                result = verify()

        now = _now()
        if result.is_success:
            changes = {
                "status": ChannelStatus.ACTIVE,
                "error_message": None,
                "last_tested": now,
                "updated_at": now,
            }
        else:
            self.registry.invalidate(channel.name)
            changes = {
                "status": ChannelStatus.ERROR,
                "error_message": result.message,
                "last_tested": now,
                "updated_at": now,
            }
        updated = self.store.update(channel.id, changes)

        logger.info(
            "channel_tested",
            channel_name=channel.name,
            success=result.is_success,
            error=None if result.is_success else result.message,
        )
        return {
            "success": result.is_success,
            "message": "Channel test successful"
            if result.is_success
            else f"Channel test failed: {result.message}",
            "channel": updated,
        }

    def set_as_default(self, id_or_name: str) -> ChannelConfig:
        channel = self.get_channel(id_or_name)
        with self._default_lock:
            self._clear_default(channel.type, keep_id=channel.id)
            updated = self.store.apply(
                channel.id,
                lambda c: {
                    "tags": c.tags if DEFAULT_TAG in c.tags else [*c.tags, DEFAULT_TAG],
                    "updated_at": _now(),
                },
            )
        if updated is None:
            raise NotFoundError(f"Channel not found: {id_or_name}")
        logger.info(
            "channel_set_as_default",
            channel_name=updated.name,
            channel_type=updated.type.value,
        )
        return updated

    def get_channel_stats(self, id_or_name: str) -> Dict[str, Any]:
        channel = self.get_channel(id_or_name)
        return {
            "name": channel.name,
            "type": channel.type.value,
            "status": channel.status.value,
            "stats": channel.stats,
            "success_rate": format_success_rate(channel.stats),
            "last_tested": channel.last_tested,
        }

    def get_channels_by_type(self, channel_type: str) -> List[ChannelConfig]:
        try:
            resolved = ChannelType(channel_type)
        except ValueError as e:
            raise ValidationError(f"Invalid channel type: {channel_type}") from e
        return self.store.find(where={"type": resolved}, sort_by="created_at")
