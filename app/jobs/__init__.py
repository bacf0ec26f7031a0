"""Background job modules for periodic tasks."""

from app.jobs.weekly_tally import weekly_tally

__all__ = ["weekly_tally"]
