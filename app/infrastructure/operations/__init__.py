"""Operation result types and status enums.

Standardized result types for provider calls, including status enums,
the result dataclass, and classifiers for provider responses and exceptions.
"""

from infrastructure.operations.classifiers import (
    classify_aws_error,
    classify_http_response,
    classify_http_status,
    classify_request_exception,
    classify_twilio_error,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "classify_http_status",
    "classify_http_response",
    "classify_request_exception",
    "classify_aws_error",
    "classify_twilio_error",
]
