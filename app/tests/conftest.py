"""Shared fixtures for the notification engine test suite.

Every fixture builds fresh in-memory stores so tests never share state with
the application-scoped providers.
"""

from unittest.mock import MagicMock

import pytest

from infrastructure.configuration import Settings
from infrastructure.notifications import (
    ChannelAdapter,
    ChannelConfig,
    ChannelRegistry,
    ChannelType,
    DeliveryOutcome,
    InAppAdapter,
)
from infrastructure.persistence import InMemoryRecordStore
from modules.notifications.core import ChannelAdminService, NotificationOrchestrator
from modules.notifications.domain.models import (
    Notification,
    NotificationPreference,
    NotificationTemplate,
)
from modules.notifications.preferences import PreferenceService
from modules.notifications.templates import TemplateService
from tests.factories import FIXED_NOW


class StubAdapter(ChannelAdapter):
    """Adapter returning a preset outcome and recording every delivery."""

    def __init__(self, channel_type: ChannelType, outcome=None, client=None):
        self.channel_type = channel_type
        self.outcome = outcome or DeliveryOutcome(success=True, message_id="msg-1")
        self.client = client if client is not None else MagicMock(name="client")
        self.build_error = None
        self.deliveries = []

    def build_client(self, channel):
        if self.build_error is not None:
            raise self.build_error
        return self.client

    def deliver(self, client, channel, notification, delivery_settings):
        self.deliveries.append((channel, notification, delivery_settings))
        return self.outcome


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def channel_store():
    return InMemoryRecordStore(ChannelConfig, name="channels")


@pytest.fixture
def notification_store():
    return InMemoryRecordStore(Notification, name="notifications")


@pytest.fixture
def template_service():
    return TemplateService(InMemoryRecordStore(NotificationTemplate, name="templates"))


@pytest.fixture
def preference_service():
    return PreferenceService(
        InMemoryRecordStore(NotificationPreference, name="preferences")
    )


@pytest.fixture
def stub_adapters():
    return {
        ChannelType.IN_APP: InAppAdapter(),
        ChannelType.EMAIL: StubAdapter(ChannelType.EMAIL),
        ChannelType.SMS: StubAdapter(ChannelType.SMS),
        ChannelType.PUSH: StubAdapter(ChannelType.PUSH),
        ChannelType.WEBHOOK: StubAdapter(ChannelType.WEBHOOK),
    }


@pytest.fixture
def registry(channel_store, stub_adapters):
    return ChannelRegistry(channel_store, stub_adapters)


@pytest.fixture
def clock():
    """Mutable clock; set `clock.now` to move time."""

    class _Clock:
        now = FIXED_NOW

        def __call__(self):
            return self.now

    return _Clock()


@pytest.fixture
def orchestrator(
    notification_store,
    template_service,
    preference_service,
    registry,
    channel_store,
    clock,
):
    return NotificationOrchestrator(
        store=notification_store,
        templates=template_service,
        preferences=preference_service,
        registry=registry,
        channel_store=channel_store,
        max_workers=4,
        clock=clock,
    )


@pytest.fixture
def channel_admin(channel_store, registry):
    return ChannelAdminService(channel_store, registry)
