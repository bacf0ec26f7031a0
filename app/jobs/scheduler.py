"""APScheduler setup and job registration."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import settings
from app.jobs.weekly_tally import weekly_tally

scheduler = AsyncIOScheduler(timezone=settings.timezone)


def register_jobs() -> None:
    """Register all periodic jobs if not already present."""
    if scheduler.get_job("weekly_tally") is None:
        scheduler.add_job(
            weekly_tally,
            CronTrigger(day_of_week="sun", hour=23, minute=55, timezone=settings.timezone),
            id="weekly_tally",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
