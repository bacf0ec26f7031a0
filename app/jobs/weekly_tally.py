"""Weekly vote tally scheduled job."""

from __future__ import annotations

import logging

from app.services.leaderboard_service import LeaderboardService
from app.utils.supabase_client import get_service_client

logger = logging.getLogger(__name__)


async def weekly_tally() -> None:
    """Snapshot staked votes into this week's leaderboard."""
    result = LeaderboardService(get_service_client()).tally_week()
    logger.info(
        "weekly_tally completed week=%s year=%s bookmarks=%s",
        result["week"],
        result["year"],
        result["bookmarks_ranked"],
    )
