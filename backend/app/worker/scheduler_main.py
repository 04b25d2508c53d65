"""Dedicated APScheduler worker that stores yesterday's daily summary."""
from __future__ import annotations

import logging
import signal
import threading
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.services.daily_summary import run_daily_summary_job

logger = logging.getLogger(__name__)

SUMMARY_JOB_ID = "daily_summary_job"


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Summary worker starting (enabled=%s)", settings.summary_job_enabled)

    scheduler = BackgroundScheduler(timezone=settings.summary_job_timezone)
    if settings.summary_job_enabled:
        register_jobs(scheduler)
        scheduler.start()
    else:
        logger.warning("Summary job disabled via config; worker will idle")

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Summary worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        run_summary_for_yesterday,
        trigger="cron",
        hour=settings.summary_job_hour,
        minute=settings.summary_job_minute,
        id=SUMMARY_JOB_ID,
        replace_existing=True,
    )
    logger.info(
        "Registered daily summary job at %02d:%02d %s",
        settings.summary_job_hour,
        settings.summary_job_minute,
        settings.summary_job_timezone,
    )


def run_summary_for_yesterday() -> None:
    yesterday = datetime.now(ZoneInfo(settings.summary_job_timezone)).date() - timedelta(days=1)
    session = SessionLocal()
    try:
        run_daily_summary_job(session, yesterday)
    except Exception:  # pragma: no cover - keep the worker alive between runs
        logger.exception("Daily summary job failed for %s", yesterday.isoformat())
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
