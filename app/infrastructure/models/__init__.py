"""Infrastructure models and response wrappers.

Exports:
    APIResponse: Generic success envelope
    ErrorResponse: Standard error envelope
    Pagination: Pagination block for list results
    PaginatedData: Page of results plus pagination
    InfrastructureModel: Base model configuration for stored records
"""

from infrastructure.models.base import InfrastructureModel
from infrastructure.models.responses import (
    APIResponse,
    ErrorResponse,
    PaginatedData,
    Pagination,
)

__all__ = [
    "APIResponse",
    "ErrorResponse",
    "InfrastructureModel",
    "PaginatedData",
    "Pagination",
]
