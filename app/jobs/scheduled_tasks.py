"""Background sweeps for scheduled and expired notifications.

The jobs run on the `schedule` library's default scheduler from a single
daemon thread started by the application lifespan.
"""

import threading
import time
from typing import TYPE_CHECKING

import schedule

from infrastructure.logging import bind_request_context, get_module_logger

if TYPE_CHECKING:
    from infrastructure.configuration.infrastructure import DispatchSettings
    from modules.notifications.core import NotificationOrchestrator

logger = get_module_logger()

SWEEP_TAG = "notification-sweeps"


def safe_run(job):
    def wrapper(*args, **kwargs):
        try:
            job(*args, **kwargs)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "safe_run_error",
                function=job.__name__,
                module=job.__module__,
                job_args=args,
                error=str(e),
            )

    return wrapper


def init(orchestrator: "NotificationOrchestrator", dispatch: "DispatchSettings"):
    logger.info("scheduled_tasks_initialized")

    schedule.every(dispatch.scheduled_sweep_seconds).seconds.do(
        safe_run(process_scheduled), orchestrator=orchestrator
    ).tag(SWEEP_TAG)
    schedule.every(dispatch.expired_sweep_seconds).seconds.do(
        safe_run(process_expired), orchestrator=orchestrator
    ).tag(SWEEP_TAG)
    schedule.every(5).minutes.do(safe_run(scheduler_heartbeat)).tag(SWEEP_TAG)


def clear():
    schedule.clear(SWEEP_TAG)


def process_scheduled(orchestrator: "NotificationOrchestrator"):
    with bind_request_context(job="process_scheduled"):
        result = orchestrator.process_scheduled_notifications()
    if result["total"]:
        logger.info(
            "scheduled_job_completed", job="process_scheduled", **_counts(result)
        )


def process_expired(orchestrator: "NotificationOrchestrator"):
    with bind_request_context(job="process_expired"):
        result = orchestrator.process_expired_notifications()
    if result["total"]:
        logger.info("scheduled_job_completed", job="process_expired", **_counts(result))


def _counts(result):
    return {k: v for k, v in result.items() if isinstance(v, int)}


def scheduler_heartbeat():
    logger.info(
        "running_scheduler_heartbeat", module="scheduled_tasks", time=time.ctime()
    )


def run_continuously(interval=1):
    """Continuously run, while executing pending jobs at each
    elapsed time interval.
    @return cease_continuous_run: threading. Event which can
    be set to cease continuous run. Please note that it is
    *intended behavior that run_continuously() does not run
    missed jobs*. For example, if the expiry sweep runs hourly and
    the thread was blocked for three hours, it runs once, not three times.
    """
    cease_continuous_run = threading.Event()

    class ScheduleThread(threading.Thread):
        @classmethod
        def run(cls):
            while not cease_continuous_run.is_set():
                schedule.run_pending()
                time.sleep(interval)

    continuous_thread = ScheduleThread(daemon=True, name="notification-scheduler")
    continuous_thread.start()
    return cease_continuous_run
