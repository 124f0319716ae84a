"""Unit tests for infrastructure.logging.setup."""

import logging

import pytest
import structlog

from infrastructure.logging.setup import (
    _build_processors,
    configure_logging,
    get_logger,
    get_module_logger,
    _is_test_environment,
)


@pytest.mark.unit
def test_detects_pytest_environment():
    assert _is_test_environment() is True


@pytest.mark.unit
class TestConfigureLogging:
    def test_returns_usable_logger(self, mock_settings):
        logger = configure_logging(settings=mock_settings)

        assert hasattr(logger, "info")
        assert hasattr(logger, "exception")

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING"])
    def test_accepts_explicit_overrides(self, level):
        logger = configure_logging(log_level=level, is_production=True)

        assert logger is not None

    def test_repeated_calls_are_safe(self, mock_settings):
        configure_logging(settings=mock_settings)
        configure_logging(settings=mock_settings)

        assert logging.getLogger().level > logging.CRITICAL

    def test_output_suppressed_under_pytest(self, mock_settings):
        configure_logging(settings=mock_settings)

        assert logging.getLogger().level >= logging.CRITICAL


@pytest.mark.unit
class TestBuildProcessors:
    def test_production_renders_json(self):
        processors = _build_processors("abc123", prod_mode=True)

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_development_renders_console(self):
        processors = _build_processors("abc123", prod_mode=False)

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_chain_stamps_service_and_redacts(self):
        processors = _build_processors("abc123", prod_mode=True)[:-1]
        event = {
            "event": "sms_sent",
            "api_key": "sk-live",
            "phone_number": "+15551234567",
        }

        for processor in processors:
            event = processor(None, "info", event)

        assert event["service"] == "notification-engine"
        assert event["version"] == "abc123"
        assert event["api_key"] == "***REDACTED***"
        assert event["phone_number"].endswith("567")
        assert "555123" not in event["phone_number"]


@pytest.mark.unit
class TestGetLogger:
    def test_explicit_name_is_bound(self, mock_settings):
        configure_logging(settings=mock_settings)

        logger = get_logger("delivery")

        assert logger._context["logger_name"] == "delivery"

    def test_auto_detected_name_is_bound(self, mock_settings):
        configure_logging(settings=mock_settings)

        logger = get_logger()

        assert "logger_name" in logger._context


@pytest.mark.unit
class TestGetModuleLogger:
    def test_binds_component_and_module_path(self, mock_settings):
        configure_logging(settings=mock_settings)

        logger = get_module_logger()

        module_path = logger._context["module_path"]
        assert logger._context["component"] == module_path.split(".")[-1]

    def test_further_binds_keep_module_context(self, mock_settings):
        configure_logging(settings=mock_settings)

        log = get_module_logger().bind(notification_id="n-1", channel="email")

        assert log._context["notification_id"] == "n-1"
        assert "component" in log._context

    def test_exception_logging_does_not_raise(self, mock_settings):
        configure_logging(settings=mock_settings)
        log = get_module_logger().bind(channel_id="ch-1")

        try:
            raise ConnectionError("provider unreachable")
        except ConnectionError:
            log.exception("delivery_failed")
