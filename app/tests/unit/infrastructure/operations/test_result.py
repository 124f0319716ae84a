"""Unit tests for OperationResult."""

import pytest

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus


@pytest.mark.unit
class TestOperationResultFactories:
    def test_success(self):
        result = OperationResult.success(data={"message_id": "m-1"}, message="Sent")

        assert result.is_success
        assert not result.is_retryable
        assert result.data == {"message_id": "m-1"}

    def test_success_defaults(self):
        result = OperationResult.success()

        assert result.message == "ok"
        assert result.data is None

    def test_transient_error_is_retryable(self):
        result = OperationResult.transient_error(
            "Rate limited", error_code="RATE_LIMITED", retry_after=30
        )

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.is_retryable
        assert result.retry_after == 30

    def test_permanent_error_is_not_retryable(self):
        result = OperationResult.permanent_error(
            "Invalid recipient", error_code="INVALID_REQUEST"
        )

        assert not result.is_success
        assert not result.is_retryable
        assert result.error_code == "INVALID_REQUEST"

    def test_not_found_is_not_retryable(self):
        result = OperationResult.error(OperationStatus.NOT_FOUND, "Gone")

        assert not result.is_retryable

    def test_error_keeps_payload(self):
        result = OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            "Server error",
            data={"status_code": 503},
        )

        assert result.data == {"status_code": 503}
