"""
Unit tests for dependency injection providers.

Tests cover:
- get_settings() caching behavior
- Channel store and registry singletons
- SettingsDep with FastAPI dependency overrides
"""

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from fastapi import FastAPI

from infrastructure.configuration import Settings
from infrastructure.notifications import (
    ChannelRegistry,
    ChannelType,
    InAppAdapter,
    WebhookAdapter,
)
from infrastructure.services.dependencies import SettingsDep
from infrastructure.services.providers import (
    get_channel_registry,
    get_channel_store,
    get_settings,
)


@pytest.fixture(autouse=True)
def cleanup_provider_cache():
    """Clear provider caches after each test."""
    yield
    get_settings.cache_clear()
    get_channel_store.cache_clear()
    get_channel_registry.cache_clear()


@pytest.mark.unit
class TestGetSettings:
    def test_returns_cached_instance(self):
        assert isinstance(get_settings(), Settings)
        assert get_settings() is get_settings()

    def test_cache_can_be_cleared(self):
        instance1 = get_settings()
        get_settings.cache_clear()

        assert get_settings() is not instance1


@pytest.mark.unit
class TestChannelRegistryProvider:
    def test_registry_is_singleton(self):
        assert get_channel_registry() is get_channel_registry()

    def test_registry_shares_channel_store(self):
        registry = get_channel_registry()

        assert isinstance(registry, ChannelRegistry)
        assert registry.channel_store is get_channel_store()

    def test_adapter_per_deliverable_type(self):
        registry = get_channel_registry()

        assert set(registry.adapters) == {
            ChannelType.IN_APP,
            ChannelType.EMAIL,
            ChannelType.SMS,
            ChannelType.PUSH,
            ChannelType.WEBHOOK,
        }
        assert isinstance(registry.get_adapter(ChannelType.IN_APP), InAppAdapter)
        assert isinstance(registry.get_adapter(ChannelType.WEBHOOK), WebhookAdapter)
        assert registry.get_adapter(ChannelType.CUSTOM) is None


@pytest.mark.unit
class TestDependencyOverridePattern:
    def test_settings_dep_with_dependency_override(self):
        app = FastAPI()

        @app.get("/config")
        def get_config(settings: SettingsDep) -> dict:
            return {"git_sha": settings.GIT_SHA}

        mock_settings = MagicMock(spec=Settings)
        mock_settings.GIT_SHA = "abc123"
        app.dependency_overrides[get_settings] = lambda: mock_settings

        with TestClient(app) as client:
            response = client.get("/config")

        assert response.json() == {"git_sha": "abc123"}
        app.dependency_overrides.clear()
