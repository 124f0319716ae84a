"""Custom structlog processors for notification engine logs.

Usage:
    from infrastructure.logging.formatters import mask_sensitive_data

Dependencies:
    - structlog processors
"""

from typing import Any


def add_service_info(service_name: str, version: str = "unknown"):
    """Create a processor that adds service name and version to log entries.

    Args:
        service_name: Name of the running service.
        version: Version string (typically the git SHA).

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict["service"] = service_name
        event_dict["version"] = version
        return event_dict

    return processor


# Keys whose values are credentials and must never reach log output
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "auth",
        "credential",
        "private_key",
        "signature",
        "service_account",
        "session_id",
        "cookie",
        "bearer",
    }
)

# Keys holding delivery destinations; partially masked rather than dropped
DESTINATION_KEYS = frozenset({"phone_number", "to_number", "email_address", "to"})


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that masks credential values in log entries.

    Any key containing one of the sensitive patterns (case-insensitive) has
    its value replaced.

    Args:
        mask_value: The string to replace sensitive values with.
        additional_patterns: Extra patterns to consider sensitive.

    Returns:
        A structlog processor function.
    """
    patterns = SENSITIVE_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        masked_dict = {}
        for key, value in event_dict.items():
            key_lower = key.lower()
            is_sensitive = any(pattern in key_lower for pattern in patterns)
            if is_sensitive and value is not None:
                masked_dict[key] = mask_value
            else:
                masked_dict[key] = value
        return masked_dict

    return processor


def mask_destinations(visible: int = 3):
    """Create a processor that partially masks phone numbers and addresses.

    Keeps the last `visible` characters so deliveries can still be correlated
    with provider dashboards.

    Args:
        visible: Number of trailing characters left readable.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key in DESTINATION_KEYS.intersection(event_dict):
            value = event_dict[key]
            if isinstance(value, str) and len(value) > visible:
                event_dict[key] = "*" * (len(value) - visible) + value[-visible:]
        return event_dict

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that truncates overly large string values.

    Rendered message bodies and provider responses can be large; this keeps
    a single log line bounded.

    Args:
        max_length: Maximum string length before truncation.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
