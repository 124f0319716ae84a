"""Shared fixtures for the structlog setup tests."""

from unittest.mock import Mock

import pytest

from infrastructure.configuration import Settings


@pytest.fixture
def mock_settings():
    """Development settings; configure_logging only reads these three."""
    return Mock(
        spec=Settings,
        LOG_LEVEL="DEBUG",
        GIT_SHA="test-sha",
        is_production=False,
    )

