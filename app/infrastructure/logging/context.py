"""Request and delivery context binding for structured logging.

Usage:
    from infrastructure.logging import bind_request_context

    with bind_request_context(correlation_id="req-123", recipient="user-1"):
        logger.info("processing_request")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    recipient: Optional[str] = None,
    notification_id: Optional[str] = None,
    request_path: Optional[str] = None,
    request_method: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind context to all logs emitted within the block.

    Used by the HTTP middleware for request-scoped fields and by the
    orchestrator around a single dispatch so adapter logs carry the
    notification id.

    Args:
        correlation_id: Unique request identifier. Inherits the current one,
            or is auto-generated when none is bound.
        recipient: Recipient user id of the notification being handled.
        notification_id: Id of the notification being dispatched.
        request_path: HTTP request path (e.g., "/api/v1/notifications").
        request_method: HTTP method (e.g., "GET", "POST").
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is bound to structlog's context vars and the
        previous values are restored on exit.
    """
    context: dict[str, Any] = {}

    context["correlation_id"] = (
        correlation_id or get_correlation_id() or str(uuid.uuid4())
    )

    if recipient is not None:
        context["recipient"] = recipient

    if notification_id is not None:
        context["notification_id"] = notification_id

    if request_path is not None:
        context["request_path"] = request_path

    if request_method is not None:
        context["request_method"] = request_method

    context.update(extra_context)

    with structlog.contextvars.bound_contextvars(**context):
        yield


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context."""
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")


def clear_request_context() -> None:
    """Clear all request-scoped context from the logging context."""
    structlog.contextvars.clear_contextvars()
