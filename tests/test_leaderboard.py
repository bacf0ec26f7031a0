"""Weekly vote tally tests."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi.testclient import TestClient

from app.services.leaderboard_service import PENDING_IPFS_HASH, LeaderboardService, rank_bookmarks
from tests.fakes import FakeSupabase


def test_rank_bookmarks_sums_and_orders() -> None:
    """Votes are summed per bookmark; ties keep first-seen order."""
    ranked = rank_bookmarks(
        [
            {"bookmark_id": "b1", "amount": 2},
            {"bookmark_id": "b2", "amount": 5},
            {"bookmark_id": "b3", "amount": 4},
            {"bookmark_id": "b1", "amount": 3},
        ]
    )
    assert ranked == [
        {"bookmark_id": "b1", "votes": 5, "rank": 1},
        {"bookmark_id": "b2", "votes": 5, "rank": 2},
        {"bookmark_id": "b3", "votes": 4, "rank": 3},
    ]


def test_tally_week_writes_leaderboard_and_nft_placeholder() -> None:
    """One leaderboard row per bookmark plus a pending NFT row."""
    db = FakeSupabase(
        {
            "stakes": [
                {"bookmark_id": "b1", "amount": 2},
                {"bookmark_id": "b2", "amount": 7},
            ]
        }
    )
    result = LeaderboardService(db).tally_week(now=datetime(2026, 1, 15, 23, 55, tzinfo=UTC))

    assert result == {
        "message": "Votes tallied successfully",
        "week": 3,
        "year": 2026,
        "bookmarks_ranked": 2,
    }
    rows = db.rows("leaderboards")
    assert [(row["bookmark_id"], row["rank"], row["week"]) for row in rows] == [("b2", 1, 3), ("b1", 2, 3)]
    nft = db.rows("leaderboard_nfts")[0]
    assert nft["ipfs_hash"] == PENDING_IPFS_HASH
    assert (nft["week"], nft["year"]) == (3, 2026)


def test_tally_endpoint_is_system_only(
    client: TestClient,
    fake_db: FakeSupabase,
    auth_headers,
    system_headers,
) -> None:
    """Regular users cannot trigger the tally."""
    fake_db.tables["stakes"] = [{"bookmark_id": "b1", "amount": 1}]
    assert client.post("/tally-votes").status_code == 401
    assert client.post("/tally-votes", headers=auth_headers("u1")).status_code == 403

    response = client.post("/tally-votes", headers=system_headers)
    assert response.status_code == 200
    assert response.json()["bookmarks_ranked"] == 1
