"""Dedicated APScheduler worker that tops up daily assignments."""
from __future__ import annotations

import logging
import signal
import threading

from apscheduler.schedulers.background import BackgroundScheduler

from app.core.clock import local_today
from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.services.job_runner import run_daily_assignments_for_all_users


logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    if settings.scheduler_enabled:
        _register_jobs(scheduler)
        scheduler.start()
        if settings.jobs_run_on_startup:
            logger.info("Running daily assignment job once on startup")
            _run_daily_assignment_job()
    else:
        logger.warning("Scheduler disabled via config; worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Scheduler worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def _register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        _run_daily_assignment_job,
        trigger="cron",
        hour=settings.daily_job_hour,
        minute=settings.daily_job_minute,
        id="daily_assignments_job",
        replace_existing=True,
        coalesce=True,
    )
    logger.info(
        "Registered daily assignment job (time=%02d:%02d %s)",
        settings.daily_job_hour,
        settings.daily_job_minute,
        settings.scheduler_timezone,
    )


def _run_daily_assignment_job() -> None:
    session = SessionLocal()
    # The scheduler timezone only decides when the cron fires; the calendar day is the user's.
    today = local_today()
    try:
        result = run_daily_assignments_for_all_users(session, today=today)
        logger.info(
            "Daily assignment job complete for %s: users=%s, created=%s, failed=%s",
            today.isoformat(),
            result.users_processed,
            result.assignments_created,
            result.users_failed,
        )
    except Exception:  # pragma: no cover - keeps the worker alive
        logger.exception("Daily assignment job failed")
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
