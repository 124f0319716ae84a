"""Provider call outcome.

Provider clients, the retry policy and the channel registry hand back an
`OperationResult` instead of raising, so a failed email or SMS call can be
classified, retried or recorded against channel statistics.
"""

from typing import Optional, Any
from dataclasses import dataclass

from infrastructure.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Outcome of one call to a delivery provider.

    Attributes:
        status: Success, or the failure class that drives retries
        message: Provider-facing summary, reused as the notification error
        data: Provider payload such as the message id or response body
        error_code: Stable code from the error classifiers
        retry_after: Seconds the provider asked us to wait before retrying
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None
    retry_after: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @property
    def is_retryable(self) -> bool:
        """Only transient failures earn another delivery attempt."""
        return self.status == OperationStatus.TRANSIENT_ERROR

    @classmethod
    def success(
        cls, data: Optional[Any] = None, message: str = "ok"
    ) -> "OperationResult":
        return cls(status=OperationStatus.SUCCESS, message=message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        data: Optional[Any] = None,
    ) -> "OperationResult":
        """Build a failed result.

        Args:
            status: Failure class (transient, permanent, not found, ...)
            message: Summary of what the provider rejected
            error_code: Classifier code, e.g. "RATE_LIMITED"
            retry_after: Provider backoff hint in seconds
            data: Raw provider response kept for diagnostics
        """
        return cls(
            status=status,
            message=message,
            error_code=error_code,
            retry_after=retry_after,
            data=data,
        )

    @classmethod
    def transient_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> "OperationResult":
        """Provider unreachable, timed out, throttled or answered 5xx."""
        return cls.error(
            OperationStatus.TRANSIENT_ERROR, message, error_code, retry_after
        )

    @classmethod
    def permanent_error(
        cls, message: str, error_code: Optional[str] = None
    ) -> "OperationResult":
        """Payload, credentials or recipient rejected; retrying will not help."""
        return cls.error(OperationStatus.PERMANENT_ERROR, message, error_code)
