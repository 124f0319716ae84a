"""Errors for the notifications module.

Services raise these; the HTTP layer maps `status_code` and `error_code`
onto the error envelope.
"""

from typing import Any, Dict, Optional


class NotificationError(Exception):
    """Base class for notification domain errors.

    Attributes:
        message: human-friendly message
        details: optional field-level detail
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(NotificationError):
    """Missing required fields or invalid values, rejected before persistence."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class NotFoundError(NotificationError):
    status_code = 404
    error_code = "NOT_FOUND"


class ConflictError(NotificationError):
    """Duplicate names and disallowed lifecycle transitions."""

    status_code = 409
    error_code = "CONFLICT"
