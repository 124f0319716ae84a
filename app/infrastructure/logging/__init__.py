"""Structured logging infrastructure.

Centralized structlog configuration for the notification engine.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_logger(): Get a logger instance with a specific name
    - get_module_logger(): Get a logger for the calling module
    - bind_request_context(): Context manager for request/dispatch-scoped logging
    - get_correlation_id(): Get current correlation ID from context
    - clear_request_context(): Clear all request context

Example:
    from infrastructure.logging import get_module_logger

    logger = get_module_logger()
    logger.info("notification_dispatched", channel="email")
"""

from infrastructure.logging.setup import (
    configure_logging,
    get_logger,
    get_module_logger,
)

from infrastructure.logging.context import (
    bind_request_context,
    get_correlation_id,
    clear_request_context,
)

from infrastructure.logging.formatters import (
    add_service_info,
    mask_destinations,
    mask_sensitive_data,
    truncate_large_values,
    SENSITIVE_PATTERNS,
)

__all__ = [
    # Setup
    "configure_logging",
    "get_logger",
    "get_module_logger",
    # Context
    "bind_request_context",
    "get_correlation_id",
    "clear_request_context",
    # Formatters
    "add_service_info",
    "mask_destinations",
    "mask_sensitive_data",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
