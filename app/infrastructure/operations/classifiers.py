"""Error classifiers for provider responses and exceptions.

Converts provider-specific failures (HTTP responses, `requests` transport
errors, AWS SDK errors, Twilio REST errors) into standardized OperationResult
objects so retry and delivery code reason about one shape.

Key Functions:
- classify_http_status(): HTTP status code -> OperationResult
- classify_http_response(): `requests.Response` -> OperationResult
- classify_request_exception(): `requests` exceptions -> OperationResult
- classify_aws_error(): AWS SDK errors (SES, SNS) -> OperationResult
- classify_twilio_error(): Twilio REST errors -> OperationResult

Usage:
    try:
        response = session.post(url, json=payload, timeout=10)
    except requests.RequestException as exc:
        return classify_request_exception(exc)
    return classify_http_response(response)
"""

from typing import Any, Mapping, Optional

import requests
from botocore.exceptions import BotoCoreError, ClientError
from twilio.base.exceptions import TwilioRestException

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

DEFAULT_RETRY_AFTER_SECONDS = 60


def _parse_retry_after(headers: Optional[Mapping[str, Any]]) -> int:
    if not headers:
        return DEFAULT_RETRY_AFTER_SECONDS
    header_value = headers.get("Retry-After") or headers.get("retry-after")
    if header_value:
        try:
            return int(header_value)
        except (ValueError, TypeError):
            pass
    return DEFAULT_RETRY_AFTER_SECONDS


def classify_http_status(
    status_code: int,
    message: str = "",
    headers: Optional[Mapping[str, Any]] = None,
    data: Optional[Any] = None,
) -> OperationResult:
    """Classify an HTTP status code into an OperationResult.

    Status Code Mapping:
    - 2xx: SUCCESS
    - 429: Rate limiting -> TRANSIENT_ERROR with retry_after
    - 404: NOT_FOUND
    - other 4xx: PERMANENT_ERROR
    - 5xx: TRANSIENT_ERROR

    Args:
        status_code: HTTP status code returned by the provider
        message: Response text or provider error message, used in the result message
        headers: Response headers (for Retry-After)
        data: Optional payload attached to the result

    Returns:
        OperationResult with appropriate status and error_code
    """
    if 200 <= status_code < 300:
        return OperationResult.success(data=data, message=f"HTTP {status_code}")

    detail = f"HTTP {status_code}" + (f": {message}" if message else "")

    if status_code == 429:
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            f"Rate limited ({detail})",
            error_code="RATE_LIMITED",
            retry_after=_parse_retry_after(headers),
            data=data,
        )

    if 500 <= status_code < 600:
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            f"Server error ({detail})",
            error_code="SERVER_ERROR",
            data=data,
        )

    if status_code == 404:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"Not found ({detail})",
            error_code="NOT_FOUND",
            data=data,
        )

    if status_code in (401, 403):
        return OperationResult.error(
            OperationStatus.PERMANENT_ERROR,
            f"Authentication failed ({detail})",
            error_code="UNAUTHORIZED",
            data=data,
        )

    return OperationResult.error(
        OperationStatus.PERMANENT_ERROR,
        f"Request rejected ({detail})",
        error_code=f"HTTP_{status_code}",
        data=data,
    )


def classify_http_response(response: requests.Response) -> OperationResult:
    """Classify a `requests` response.

    The response body (JSON when parseable, text otherwise) and status code
    are attached as `data` so callers can read provider message ids.
    """
    try:
        body: Any = response.json()
    except ValueError:
        body = response.text

    message = "" if 200 <= response.status_code < 300 else str(body)[:200]
    return classify_http_status(
        response.status_code,
        message=message,
        headers=response.headers,
        data={"status_code": response.status_code, "body": body},
    )


def classify_request_exception(exc: Exception) -> OperationResult:
    """Classify an exception raised while performing an HTTP request.

    Timeouts and connection failures are transient. Malformed requests
    (bad URL, bad schema) are permanent. Anything else raised by `requests`
    is treated as a network error and is transient.

    Args:
        exc: Exception raised by `requests`

    Returns:
        OperationResult with TRANSIENT_ERROR or PERMANENT_ERROR status
    """
    if isinstance(exc, requests.exceptions.Timeout):
        return OperationResult.transient_error(
            f"Request timed out: {exc}",
            error_code="TIMEOUT",
        )

    if isinstance(exc, requests.exceptions.ConnectionError):
        return OperationResult.transient_error(
            f"Connection error: {exc}",
            error_code="CONNECTION_ERROR",
        )

    if isinstance(
        exc,
        (
            requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
        ),
    ):
        return OperationResult.permanent_error(
            f"Invalid request: {exc}",
            error_code="INVALID_REQUEST",
        )

    if isinstance(exc, requests.exceptions.RequestException):
        return OperationResult.transient_error(
            f"Network error: {type(exc).__name__}: {exc}",
            error_code="NETWORK_ERROR",
        )

    return OperationResult.permanent_error(
        f"Unexpected error: {type(exc).__name__}: {exc}",
        error_code="UNEXPECTED_ERROR",
    )


def classify_aws_error(exc: Exception) -> OperationResult:
    """Classify AWS SDK errors (SES, SNS) into OperationResult.

    Error Code Mapping:
    - Throttling/ThrottlingException: TRANSIENT_ERROR with retry_after
    - AccessDenied*/InvalidClientTokenId: PERMANENT_ERROR
    - MessageRejected, InvalidParameter*, ValidationError, OptedOut: PERMANENT_ERROR
    - NotFound*: NOT_FOUND
    - Other: TRANSIENT_ERROR (AWS convention)

    Args:
        exc: Exception raised by boto3/botocore

    Returns:
        OperationResult with appropriate status and error_code
    """
    if not isinstance(exc, ClientError):
        if isinstance(exc, BotoCoreError):
            return OperationResult.transient_error(
                f"AWS connection error: {type(exc).__name__}: {exc}",
                error_code="CONNECTION_ERROR",
            )
        return OperationResult.permanent_error(
            f"Unexpected AWS error: {type(exc).__name__}: {exc}",
            error_code="UNEXPECTED_ERROR",
        )

    error_info = exc.response.get("Error", {}) if exc.response else {}
    error_code = error_info.get("Code", "Unknown")
    error_message = error_info.get("Message", str(exc))

    if error_code in ("Throttling", "ThrottlingException", "TooManyRequestsException"):
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            f"AWS API throttled: {error_message}",
            error_code="RATE_LIMITED",
            retry_after=DEFAULT_RETRY_AFTER_SECONDS,
        )

    if error_code in (
        "AccessDenied",
        "AccessDeniedException",
        "InvalidClientTokenId",
        "AuthorizationError",
    ):
        return OperationResult.permanent_error(
            f"AWS access denied: {error_message}",
            error_code="UNAUTHORIZED",
        )

    if error_code.startswith("NotFound") or error_code.endswith("NotFound"):
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"AWS resource not found: {error_message}",
            error_code="NOT_FOUND",
        )

    if error_code in (
        "MessageRejected",
        "MailFromDomainNotVerified",
        "InvalidParameter",
        "InvalidParameterValue",
        "InvalidParameterException",
        "ValidationError",
        "OptedOut",
    ):
        return OperationResult.permanent_error(
            f"AWS rejected request ({error_code}): {error_message}",
            error_code="INVALID_REQUEST",
        )

    return OperationResult.transient_error(
        f"AWS client error ({error_code}): {error_message}",
        error_code="AWS_CLIENT_ERROR",
    )


def classify_twilio_error(exc: Exception) -> OperationResult:
    """Classify Twilio REST errors into OperationResult.

    Twilio raises TwilioRestException carrying the HTTP status; the status
    mapping follows classify_http_status. Other exceptions are transport
    failures and are transient.
    """
    if isinstance(exc, TwilioRestException):
        return classify_http_status(exc.status, message=exc.msg)

    return OperationResult.transient_error(
        f"Twilio connection error: {type(exc).__name__}: {exc}",
        error_code="CONNECTION_ERROR",
    )
