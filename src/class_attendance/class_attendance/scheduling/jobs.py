from __future__ import annotations

import atexit
import logging

from apscheduler.schedulers.background import BackgroundScheduler

from ..retention.service import RetentionService
from ..sessions.service import SessionService

logger = logging.getLogger(__name__)


def run_expire_sweep(sessions: SessionService) -> int:
    try:
        return sessions.expire_sweep()
    except Exception as e:
        # Keep the job scheduled; the next tick retries with fresh state
        logger.error("Error in expire sweep: %s", e, exc_info=True)
        return 0


def run_retention_sweep(retention: RetentionService) -> None:
    try:
        retention.sweep()
    except Exception as e:
        logger.error("Error in retention sweep: %s", e, exc_info=True)


def build_scheduler(
    *,
    sessions: SessionService,
    retention: RetentionService,
    expire_seconds: int,
    retention_minutes: int,
) -> BackgroundScheduler:
    """Both jobs mutate state through the store transaction, same lock as requests."""

    scheduler = BackgroundScheduler(daemon=True)
    scheduler.add_job(
        func=run_expire_sweep,
        args=[sessions],
        trigger="interval",
        seconds=expire_seconds,
        id="expire_sessions",
        name="Close sessions past their time window",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        func=run_retention_sweep,
        args=[retention],
        trigger="interval",
        minutes=retention_minutes,
        id="retention_sweep",
        name="Purge old sessions and attendance",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def start_background_jobs(
    *,
    sessions: SessionService,
    retention: RetentionService,
    expire_seconds: int,
    retention_minutes: int,
) -> BackgroundScheduler:
    """Run both sweeps once now, then keep them on their intervals.

    Expiry goes first so sessions left active by a previous run are closed
    before retention decides what is old enough to purge.
    """

    sessions.expire_sweep()
    retention.sweep()

    scheduler = build_scheduler(
        sessions=sessions,
        retention=retention,
        expire_seconds=expire_seconds,
        retention_minutes=retention_minutes,
    )
    scheduler.start()
    logger.info("Background jobs started (expiry every %ss, retention every %smin)", expire_seconds, retention_minutes)

    atexit.register(shutdown_scheduler, scheduler)
    return scheduler


def shutdown_scheduler(scheduler: BackgroundScheduler) -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
