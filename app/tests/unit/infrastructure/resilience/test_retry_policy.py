"""Unit tests for the delivery retry policy."""

from unittest.mock import MagicMock

import pytest

from infrastructure.configuration import RetrySettings
from infrastructure.operations import OperationResult
from infrastructure.resilience import RetryConfig, RetryExhaustedError, RetryPolicy


def _transient(message="HTTP 503"):
    return OperationResult.transient_error(message, error_code="SERVER_ERROR")


@pytest.mark.unit
class TestRetryConfig:
    def test_defaults(self):
        config = RetryConfig()

        assert config.max_attempts == 3
        assert config.effective_attempts == 3

    def test_disabled_makes_single_attempt(self):
        assert RetryConfig(enabled=False, max_attempts=5).effective_attempts == 1

    def test_delay_grows_geometrically(self):
        config = RetryConfig(initial_delay_seconds=0.5, backoff_factor=3)

        assert [config.delay_for(n) for n in range(3)] == [0.5, 1.5, 4.5]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"initial_delay_seconds": -1},
            {"backoff_factor": 0.5},
        ],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            RetryConfig(**kwargs)

    def test_from_channel_config_falls_back_to_defaults(self):
        defaults = RetryConfig(max_attempts=4, initial_delay_seconds=2)

        config = RetryConfig.from_channel_config({"max_attempts": 2}, defaults)

        assert config.max_attempts == 2
        assert config.initial_delay_seconds == 2

    def test_from_channel_config_reads_initial_delay(self):
        config = RetryConfig.from_channel_config({"initial_delay": 0.25})

        assert config.initial_delay_seconds == 0.25

    def test_from_settings(self):
        settings = RetrySettings(DELIVERY_RETRY_MAX_ATTEMPTS=7)

        assert RetryConfig.from_settings(settings).max_attempts == 7


@pytest.mark.unit
class TestRetryPolicy:
    def test_success_on_first_attempt(self):
        sleep = MagicMock()
        func = MagicMock(return_value=OperationResult.success())

        result = RetryPolicy(RetryConfig(), sleep=sleep).execute(func)

        assert result.is_success
        func.assert_called_once()
        sleep.assert_not_called()

    def test_retries_transient_then_succeeds(self):
        sleep = MagicMock()
        func = MagicMock(side_effect=[_transient(), OperationResult.success()])
        policy = RetryPolicy(
            RetryConfig(max_attempts=3, initial_delay_seconds=1), sleep=sleep
        )

        result = policy.execute(func)

        assert result.is_success
        assert func.call_count == 2
        sleep.assert_called_once_with(1)

    def test_backoff_delays(self):
        sleep = MagicMock()
        policy = RetryPolicy(
            RetryConfig(max_attempts=4, initial_delay_seconds=1, backoff_factor=2),
            sleep=sleep,
        )

        with pytest.raises(RetryExhaustedError) as exc_info:
            policy.execute(MagicMock(return_value=_transient()))

        assert [c.args[0] for c in sleep.call_args_list] == [1, 2, 4]
        assert exc_info.value.attempts == 4
        assert exc_info.value.retryable is True

    def test_terminal_error_is_not_retried(self):
        sleep = MagicMock()
        func = MagicMock(return_value=OperationResult.permanent_error("HTTP 400"))

        with pytest.raises(RetryExhaustedError) as exc_info:
            RetryPolicy(RetryConfig(max_attempts=5), sleep=sleep).execute(func)

        func.assert_called_once()
        sleep.assert_not_called()
        assert str(exc_info.value) == "HTTP 400"
        assert exc_info.value.retryable is False

    def test_exhausted_error_carries_last_message(self):
        func = MagicMock(side_effect=[_transient("first"), _transient("last")])

        with pytest.raises(RetryExhaustedError) as exc_info:
            RetryPolicy(RetryConfig(max_attempts=2), sleep=MagicMock()).execute(func)

        assert str(exc_info.value) == "last"
        assert exc_info.value.last_result.message == "last"

    def test_disabled_retry_makes_one_attempt(self):
        func = MagicMock(return_value=_transient())

        with pytest.raises(RetryExhaustedError):
            RetryPolicy(
                RetryConfig(enabled=False, max_attempts=5), sleep=MagicMock()
            ).execute(func)

        func.assert_called_once()

    def test_exceptions_are_treated_as_transient(self):
        func = MagicMock(
            side_effect=[ConnectionError("reset"), OperationResult.success()]
        )

        result = RetryPolicy(RetryConfig(), sleep=MagicMock()).execute(func)

        assert result.is_success
        assert func.call_count == 2
