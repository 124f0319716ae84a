"""Unit tests for request context binding."""

import pytest
import structlog

from infrastructure.logging import (
    bind_request_context,
    clear_request_context,
    get_correlation_id,
)


@pytest.fixture(autouse=True)
def clean_context():
    clear_request_context()
    yield
    clear_request_context()


@pytest.mark.unit
class TestBindRequestContext:
    def test_binds_given_correlation_id(self):
        with bind_request_context(correlation_id="req-1"):
            assert get_correlation_id() == "req-1"

        assert get_correlation_id() is None

    def test_generates_correlation_id(self):
        with bind_request_context():
            assert get_correlation_id()

    def test_nested_context_inherits_and_restores(self):
        with bind_request_context(correlation_id="outer", recipient="user-1"):
            with bind_request_context(notification_id="n-1"):
                ctx = structlog.contextvars.get_contextvars()
                assert ctx["correlation_id"] == "outer"
                assert ctx["notification_id"] == "n-1"
            ctx = structlog.contextvars.get_contextvars()
            assert "notification_id" not in ctx
            assert ctx["recipient"] == "user-1"

    def test_extra_context(self):
        with bind_request_context(correlation_id="c", batch_index=3):
            assert structlog.contextvars.get_contextvars()["batch_index"] == 3
