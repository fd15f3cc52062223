"""Scheduler for housekeeping jobs."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from todo_backend.core.config import settings
from todo_backend.services.session_registry import SessionRegistry


logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "sweep_expired_sessions"

# Global scheduler instance
scheduler = AsyncIOScheduler()


def sweep_expired_sessions(registry: SessionRegistry) -> None:
    """Drop expired sessions; lazy expiry in ``resolve`` keeps this optional."""
    try:
        removed = registry.sweep_expired()
        logger.info("session_sweep_complete", extra={"removed": removed, "active": registry.active_count()})
    except Exception as e:
        logger.error("session_sweep_failed", extra={"error": str(e)})


def start_scheduler(registry: SessionRegistry) -> None:
    """Register housekeeping jobs and start the scheduler."""
    interval = settings.session_sweep_interval_minutes
    if interval <= 0:
        logger.info("Session sweep disabled")
        return

    scheduler.add_job(
        sweep_expired_sessions,
        trigger=IntervalTrigger(minutes=interval),
        args=[registry],
        id=SWEEP_JOB_ID,
        name="Sweep expired sessions",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler started", extra={"sweep_interval_minutes": interval})


def stop_scheduler() -> None:
    """Stop the scheduler if it is running."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
