"""Preference administration and delivery checks."""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import (
    ChannelType,
    DeliverySettings,
    NotificationPriority,
    PushPlatform,
    PushToken,
    WebhookEndpoint,
)
from infrastructure.persistence import RecordStore
from modules.notifications.domain.errors import NotFoundError, ValidationError
from modules.notifications.domain.models import NotificationPreference
from modules.notifications.preferences.evaluator import (
    get_delivery_settings,
    is_enabled,
)

logger = get_module_logger()

PROTECTED_FIELDS = ("id", "user_id", "created_at")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def deep_merge(base: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    """Merge `changes` into a copy of `base`, recursing into nested dicts."""
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class PreferenceService:
    """Per-user preference records.

    Records are created lazily on first access. Mutations go through the
    store's atomic `apply` so concurrent token or endpoint edits do not
    overwrite each other.
    """

    def __init__(self, store: RecordStore[NotificationPreference]):
        self.store = store
        self._create_lock = threading.Lock()

    def get(self, user_id: str) -> Optional[NotificationPreference]:
        """Return the user's record without creating one."""
        matches = self.store.find(where={"user_id": user_id}, limit=1)
        return matches[0] if matches else None

    def get_or_create(self, user_id: str) -> NotificationPreference:
        existing = self.get(user_id)
        if existing is not None:
            return existing
        with self._create_lock:
            existing = self.get(user_id)
            if existing is not None:
                return existing
            now = _now()
            created = self.store.create(
                NotificationPreference(user_id=user_id, created_at=now, updated_at=now)
            )
        logger.info("preferences_created", user_id=user_id)
        return created

    def _mutate(self, user_id: str, mutator) -> NotificationPreference:
        preference = self.get_or_create(user_id)
        try:
            updated = self.store.apply(preference.id, mutator)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid preference data",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e
        if updated is None:
            raise NotFoundError(f"Preferences not found for user: {user_id}")
        return updated

    def update_preferences(
        self, user_id: str, changes: Dict[str, Any]
    ) -> NotificationPreference:
        """Deep-merge `changes` into the user's preferences."""
        changes = {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}

        def merge(current: NotificationPreference) -> Dict[str, Any]:
            merged = deep_merge(current.model_dump(mode="json"), changes)
            merged["updated_at"] = _now()
            return merged

        updated = self._mutate(user_id, merge)
        logger.info("preferences_updated", user_id=user_id, fields=sorted(changes))
        return updated

    def reset_preferences(self, user_id: str) -> NotificationPreference:
        existing = self.get(user_id)
        if existing is not None:
            self.store.delete(existing.id)
        logger.info("preferences_reset", user_id=user_id)
        return self.get_or_create(user_id)

    def add_push_token(
        self,
        user_id: str,
        token: str,
        platform: PushPlatform = PushPlatform.ANDROID,
        device: Optional[str] = None,
    ) -> NotificationPreference:
        """Register a device token, replacing an existing entry for the same token."""
        if not token:
            raise ValidationError("Push token is required")
        entry = PushToken(
            token=token, platform=platform, device=device, last_used=_now(), active=True
        )

        def add(current: NotificationPreference) -> Dict[str, Any]:
            tokens = [t for t in current.channels.push.tokens if t.token != token]
            tokens.append(entry)
            push = current.channels.push.model_copy(update={"tokens": tokens})
            channels = current.channels.model_copy(update={"push": push})
            return {"channels": channels.model_dump(), "updated_at": _now()}

        return self._mutate(user_id, add)

    def remove_push_token(self, user_id: str, token: str) -> NotificationPreference:
        preference = self.get_or_create(user_id)
        if not any(t.token == token for t in preference.channels.push.tokens):
            raise NotFoundError("Push token not found")

        def remove(current: NotificationPreference) -> Dict[str, Any]:
            tokens = [t for t in current.channels.push.tokens if t.token != token]
            push = current.channels.push.model_copy(update={"tokens": tokens})
            channels = current.channels.model_copy(update={"push": push})
            return {"channels": channels.model_dump(), "updated_at": _now()}

        return self._mutate(user_id, remove)

    def add_webhook_endpoint(
        self,
        user_id: str,
        url: str,
        secret: Optional[str] = None,
        description: Optional[str] = None,
        events: Optional[List[str]] = None,
    ) -> NotificationPreference:
        try:
            endpoint = WebhookEndpoint(
                url=url, secret=secret, description=description, events=events or []
            )
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid webhook URL: {url}",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

        def add(current: NotificationPreference) -> Dict[str, Any]:
            endpoints = [e for e in current.channels.webhook.endpoints if e.url != url]
            endpoints.append(endpoint)
            webhook = current.channels.webhook.model_copy(
                update={"endpoints": endpoints}
            )
            channels = current.channels.model_copy(update={"webhook": webhook})
            return {"channels": channels.model_dump(), "updated_at": _now()}

        return self._mutate(user_id, add)

    def remove_webhook_endpoint(self, user_id: str, url: str) -> NotificationPreference:
        preference = self.get_or_create(user_id)
        if not any(e.url == url for e in preference.channels.webhook.endpoints):
            raise NotFoundError("Webhook endpoint not found")

        def remove(current: NotificationPreference) -> Dict[str, Any]:
            endpoints = [e for e in current.channels.webhook.endpoints if e.url != url]
            webhook = current.channels.webhook.model_copy(
                update={"endpoints": endpoints}
            )
            channels = current.channels.model_copy(update={"webhook": webhook})
            return {"channels": channels.model_dump(), "updated_at": _now()}

        return self._mutate(user_id, remove)

    def get_delivery_settings(
        self,
        user_id: str,
        channel: ChannelType,
        category: Optional[str] = None,
        type: Optional[str] = None,
    ) -> DeliverySettings:
        return get_delivery_settings(self.get(user_id), channel, category, type)

    def check_delivery(
        self,
        user_id: str,
        category: str,
        type: str,
        channel: ChannelType,
        priority: NotificationPriority = NotificationPriority.NORMAL,
        template_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        preference = self.get(user_id)
        enabled = is_enabled(
            preference, category, type, channel, priority, template_name
        )
        return {
            "enabled": enabled,
            "delivery_settings": get_delivery_settings(
                preference, channel, category, type
            )
            if enabled
            else None,
        }
