"""Standard API response envelopes.

Every endpoint answers with `{success, data, message?}` on success and
`{success: false, error, error_code, details?}` on failure.
"""

from typing import Any, Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Generic API response wrapper.

    Attributes:
        success: Whether the operation succeeded
        data: Response payload
        message: Optional human-readable message
        error_code: Optional machine-readable code

    Example:
        >>> APIResponse(success=True, data={"count": 3}, message="ok")
    """

    success: bool = Field(..., description="Whether the operation succeeded")
    data: T | None = Field(default=None, description="Response payload")
    message: str | None = Field(
        default=None, description="Optional human-readable message"
    )
    error_code: str | None = Field(
        default=None, description="Optional machine-readable error code"
    )


class ErrorResponse(BaseModel):
    """Standard error response wrapper.

    Attributes:
        success: Always False for error responses
        error: Human-readable error message
        error_code: Machine-readable error code
        details: Optional field-level detail (e.g., validation errors)
    """

    success: bool = Field(default=False, description="Always False for error responses")
    error: str = Field(..., description="Human-readable error message")
    error_code: str = Field(..., description="Machine-readable error code")
    details: dict[str, Any] | None = Field(
        default=None, description="Optional additional error details"
    )


class Pagination(BaseModel):
    """Pagination block returned with list results."""

    total: int
    page: int
    limit: int
    pages: int


class PaginatedData(BaseModel, Generic[T]):
    """A page of results plus its pagination block."""

    data: List[T]
    pagination: Pagination
