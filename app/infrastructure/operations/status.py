"""Operation status enumeration.

Classifies the outcome of provider calls so callers can decide between
retrying, failing the delivery, or reporting a missing resource.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, 5xx, rate limit)
        PERMANENT_ERROR: Non-retryable error (validation, auth, rejected payload)
        NOT_FOUND: Resource not found
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    NOT_FOUND = "not_found"
