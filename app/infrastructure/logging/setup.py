"""Structlog setup for the notification engine.

Every log line carries the service name and git SHA, the callsite, and the
bound correlation/notification context. Credentials are redacted and phone
numbers and email addresses partially masked before rendering. Development
renders to the console, production to JSON, and pytest runs are silenced.

Usage:
    from infrastructure.logging import configure_logging, get_module_logger

    configure_logging(settings=settings)

    logger = get_module_logger()
    logger.info("notification_sent", notification_id=notification.id)
"""

import logging
import sys
import inspect
import structlog
from structlog.stdlib import BoundLogger
from typing import List, Optional, TYPE_CHECKING

from infrastructure.logging.formatters import (
    add_service_info,
    mask_destinations,
    mask_sensitive_data,
    truncate_large_values,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

SERVICE_NAME = "notification-engine"

# Above CRITICAL, so nothing reaches a handler
SILENT_LEVEL = logging.CRITICAL + 1


def _is_test_environment() -> bool:
    return "pytest" in sys.modules


def _build_processors(version: str, prod_mode: bool) -> List:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        add_service_info(SERVICE_NAME, version),
        # Redaction runs before truncation so a long secret is never half kept
        mask_sensitive_data(),
        mask_destinations(),
        truncate_large_values(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if prod_mode:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
    settings: Optional["Settings"] = None,
) -> BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Overrides settings.LOG_LEVEL.
        is_production: Overrides settings.is_production; selects JSON output.
        settings: Settings to read defaults from. Loaded from the environment
            when omitted and an override is missing.

    Returns:
        A logger using the new configuration
    """
    if _is_test_environment():
        # Bound loggers still need a processor chain; output is dropped at
        # the root level.
        logging.root.setLevel(SILENT_LEVEL)
        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(format="%(message)s", level=SILENT_LEVEL, force=True)
        return structlog.stdlib.get_logger()

    if settings is None and (log_level is None or is_production is None):
        from infrastructure.configuration import Settings

        settings = Settings()

    prod_mode = is_production if is_production is not None else settings.is_production
    version = settings.GIT_SHA if settings is not None else "unknown"

    structlog.configure(
        processors=_build_processors(version, prod_mode),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    effective_log_level = log_level or settings.LOG_LEVEL
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, effective_log_level.upper(), logging.INFO),
    )

    return structlog.stdlib.get_logger()


def _caller_module_name() -> Optional[str]:
    """Name of the module that called our caller, if it can be resolved."""
    frame = inspect.currentframe()
    # Skip this helper and the public get_*logger function
    for _ in range(2):
        frame = frame.f_back if frame is not None else None
    module = inspect.getmodule(frame) if frame is not None else None
    return module.__name__ if module is not None else None


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """Get a logger with `logger_name` bound to `name` or the calling module."""
    logger = structlog.stdlib.get_logger()
    return logger.bind(logger_name=name or _caller_module_name() or "unknown")


def get_module_logger() -> BoundLogger:
    """Get a logger bound to the calling module.

    Binds `component` (last dotted segment) and `module_path`:

        # in modules/notifications/core/orchestrator.py
        logger = get_module_logger()
        # {"component": "orchestrator",
        #  "module_path": "modules.notifications.core.orchestrator"}
    """
    logger = structlog.stdlib.get_logger()
    module_name = _caller_module_name()
    if module_name is None:
        return logger.bind(component="unknown")
    return logger.bind(component=module_name.split(".")[-1], module_path=module_name)
