"""Unit tests for the settings aggregator."""

import pytest

from infrastructure.configuration import Settings
from infrastructure.configuration.base import (
    InfrastructureSettings,
    IntegrationSettings,
)
from infrastructure.configuration.infrastructure import (
    DispatchSettings,
    RetrySettings,
    WebhookSettings,
)


@pytest.mark.unit
class TestSettings:
    def test_sections_are_instantiated(self):
        settings = Settings()

        assert isinstance(settings.dispatch, DispatchSettings)
        assert isinstance(settings.retry, RetrySettings)
        assert isinstance(settings.webhook, WebhookSettings)

    def test_section_override(self):
        dispatch = DispatchSettings(NOTIFICATION_DISPATCH_MAX_WORKERS=2)

        settings = Settings(dispatch=dispatch)

        assert settings.dispatch.max_workers == 2

    def test_is_production_when_prefix_empty(self, monkeypatch):
        monkeypatch.setenv("PREFIX", "")

        assert Settings().is_production is True

    def test_not_production_with_prefix(self, monkeypatch):
        monkeypatch.setenv("PREFIX", "dev-")

        assert Settings().is_production is False


@pytest.mark.unit
class TestSectionDefaults:
    def test_dispatch_defaults(self):
        dispatch = DispatchSettings()

        assert dispatch.max_workers == 8
        assert dispatch.sweep_limit == 100
        assert dispatch.scheduler_enabled is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DELIVERY_RETRY_MAX_ATTEMPTS", "5")
        monkeypatch.setenv("WEBHOOK_HEADER_PREFIX", "X-Acme")

        assert RetrySettings().max_attempts == 5
        assert WebhookSettings().WEBHOOK_HEADER_PREFIX == "X-Acme"


@pytest.mark.unit
class TestSettingsStructure:
    def test_provider_sections_share_integration_base(self):
        settings = Settings()

        for section in (settings.email, settings.sms, settings.push):
            assert isinstance(section, IntegrationSettings)

    def test_engine_sections_share_infrastructure_base(self):
        settings = Settings()

        for section in (
            settings.server,
            settings.dispatch,
            settings.retry,
            settings.webhook,
        ):
            assert isinstance(section, InfrastructureSettings)
