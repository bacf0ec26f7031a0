"""Weekly leaderboard tally endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.dependencies import get_db_client, require_system_caller
from app.services.leaderboard_service import LeaderboardService
from app.services.ledger_service import CallerContext
from supabase import Client

router = APIRouter()


@router.post("/tally-votes")
def tally_votes(
    _: CallerContext = Depends(require_system_caller),
    client: Client = Depends(get_db_client),
) -> dict:
    """Rank bookmarks by staked votes for the current week."""
    return LeaderboardService(client).tally_week()
