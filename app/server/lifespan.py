from contextlib import asynccontextmanager
import threading
from typing import AsyncIterator, Optional, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.services import get_settings
from jobs import scheduled_tasks
from modules.notifications.api.providers import get_notification_orchestrator

if TYPE_CHECKING:
    from infrastructure.configuration import Settings


def _get_logger(settings: "Settings") -> BoundLogger:
    return configure_logging(settings=settings)


def _list_configs(settings: "Settings", logger: BoundLogger) -> None:
    config_settings: dict[str, list[object]] = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


def _start_scheduled_tasks(
    settings: "Settings",
    logger: BoundLogger,
) -> Optional[threading.Event]:
    if not settings.dispatch.scheduler_enabled:
        logger.info("scheduled_tasks_skipped", reason="scheduler_disabled")
        return None

    scheduled_tasks.init(get_notification_orchestrator(), settings.dispatch)
    stop_event = scheduled_tasks.run_continuously()
    logger.info(
        "scheduled_tasks_started",
        scheduled_sweep_seconds=settings.dispatch.scheduled_sweep_seconds,
        expired_sweep_seconds=settings.dispatch.expired_sweep_seconds,
    )
    return stop_event


def _stop_scheduled_tasks(stop_event: Optional[threading.Event]) -> None:
    if stop_event is None:
        return
    stop_event.set()
    scheduled_tasks.clear()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = _get_logger(settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _list_configs(settings, logger)

    app.state.scheduled_stop_event = _start_scheduled_tasks(settings, logger)

    yield

    logger.info("application_shutdown")
    _stop_scheduled_tasks(app.state.scheduled_stop_event)
