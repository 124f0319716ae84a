"""Bounded exponential backoff around a single outbound call."""

import time
from typing import Callable, Optional

from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult
from infrastructure.resilience.retry.config import RetryConfig

logger = get_module_logger()


class RetryExhaustedError(Exception):
    """Raised when a call fails terminally or runs out of attempts.

    Attributes:
        attempts: Number of attempts made
        last_result: OperationResult of the final attempt
        retryable: True if the last failure was retryable (attempts ran out)
    """

    def __init__(self, message: str, attempts: int, last_result: OperationResult):
        super().__init__(message)
        self.attempts = attempts
        self.last_result = last_result
        self.retryable = last_result.is_retryable


class RetryPolicy:
    """Runs a call until it succeeds, fails terminally, or attempts run out.

    The call returns an OperationResult. TRANSIENT_ERROR results are
    retried after `initial_delay * backoff_factor ** attempt` seconds; any
    other non-success status stops immediately. Exceptions escaping the call
    are treated as transient network failures.

    The sleep function is injectable so tests can observe the delays
    without waiting.

    Example:
        policy = RetryPolicy(RetryConfig(max_attempts=3))
        try:
            result = policy.execute(lambda: post_webhook(url, body))
        except RetryExhaustedError as e:
            logger.error("delivery_failed", attempts=e.attempts, error=str(e))
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or RetryConfig()
        self._sleep = sleep

    def execute(
        self, func: Callable[[], OperationResult], operation: str = "delivery"
    ) -> OperationResult:
        """Execute `func` under the retry policy.

        Args:
            func: Zero-argument callable returning an OperationResult
            operation: Label used in log events

        Returns:
            The successful OperationResult

        Raises:
            RetryExhaustedError: On a terminal failure or when attempts run out
        """
        max_attempts = self.config.effective_attempts
        attempt = 0

        while True:
            try:
                result = func()
            except Exception as e:  # pylint: disable=broad-except
                result = OperationResult.transient_error(
                    f"{type(e).__name__}: {e}", error_code="UNHANDLED_EXCEPTION"
                )

            if result.is_success:
                if attempt > 0:
                    logger.info(
                        "retry_succeeded", operation=operation, attempts=attempt + 1
                    )
                return result

            attempts_made = attempt + 1
            if not result.is_retryable or attempts_made >= max_attempts:
                logger.warning(
                    "retry_gave_up",
                    operation=operation,
                    attempts=attempts_made,
                    retryable=result.is_retryable,
                    error=result.message,
                )
                raise RetryExhaustedError(result.message, attempts_made, result)

            delay = self.config.delay_for(attempt)
            logger.info(
                "retry_scheduled",
                operation=operation,
                attempt=attempts_made,
                delay_seconds=delay,
                error=result.message,
            )
            self._sleep(delay)
            attempt += 1
