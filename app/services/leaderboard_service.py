"""Weekly bookmark vote tally."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from app.services.common import SupabaseService
from app.utils.time import now_utc, week_of_year
from supabase import Client

# Placeholder until leaderboard snapshots are pinned to IPFS.
PENDING_IPFS_HASH = "placeholder"


def rank_bookmarks(stakes: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Sum stake amounts per bookmark and rank by votes, highest first.

    Ties keep the order in which bookmarks first appear in ``stakes``.
    """
    votes: dict[str, int] = {}
    for stake in stakes:
        bookmark_id = str(stake["bookmark_id"])
        votes[bookmark_id] = votes.get(bookmark_id, 0) + int(stake.get("amount") or 0)

    ranked = sorted(votes.items(), key=lambda item: item[1], reverse=True)
    return [
        {"bookmark_id": bookmark_id, "votes": total, "rank": index}
        for index, (bookmark_id, total) in enumerate(ranked, start=1)
    ]


class LeaderboardService:
    """Snapshot stake totals into the weekly leaderboard."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def tally_week(self, now: datetime | None = None) -> dict[str, Any]:
        """Rank every bookmark by staked votes and store this week's leaderboard."""
        moment = now or now_utc()
        week, year = week_of_year(moment)
        created_at = moment.isoformat()

        stakes = self.db.select_many("stakes", columns="bookmark_id,amount")
        ranked = rank_bookmarks(stakes)
        self.db.insert_many(
            "leaderboards",
            [{**entry, "week": week, "year": year, "created_at": created_at} for entry in ranked],
        )
        self.db.insert_one(
            "leaderboard_nfts",
            {"week": week, "year": year, "ipfs_hash": PENDING_IPFS_HASH, "created_at": created_at},
        )
        return {
            "message": "Votes tallied successfully",
            "week": week,
            "year": year,
            "bookmarks_ranked": len(ranked),
        }
