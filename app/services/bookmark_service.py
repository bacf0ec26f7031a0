"""Bookmark (book) CRUD with stake-derived delegation totals."""

from __future__ import annotations

import logging
from typing import Any

from app.services.common import SupabaseService, group_by
from app.utils.errors import ForbiddenError, InvalidInputError, NotFoundError
from app.utils.time import now_utc
from supabase import Client

logger = logging.getLogger(__name__)

SORT_FIELDS = ("created_at", "title", "total_delegations")


def total_delegations(stakes: list[dict[str, Any]]) -> int:
    """Sum stake amounts, ignoring rows without a numeric amount."""
    return sum(
        stake["amount"]
        for stake in stakes
        if isinstance(stake.get("amount"), int | float) and not isinstance(stake["amount"], bool)
    )


class BookmarkService:
    """Create, list, update and delete bookmarks."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def _attach_delegations(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        stakes = self.db.select_in(
            "stakes",
            "bookmark_id",
            [row["id"] for row in rows],
            columns="id,amount,user_id,bookmark_id",
        )
        stakes_by_bookmark = group_by(stakes, "bookmark_id")
        enriched: list[dict[str, Any]] = []
        for row in rows:
            payload = dict(row)
            payload["total_delegations"] = total_delegations(
                stakes_by_bookmark.get(str(row["id"]), [])
            )
            enriched.append(payload)
        return enriched

    def list_bookmarks(
        self,
        user_id: str | None = None,
        sort_by: str = "created_at",
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Return bookmarks, optionally only those added by ``user_id``."""
        if sort_by not in SORT_FIELDS:
            raise InvalidInputError(f"sortBy must be one of {', '.join(SORT_FIELDS)}")

        filters = {"added_by": user_id} if user_id else None
        if sort_by == "total_delegations":
            # Totals are derived from stakes, so rank in process before paging.
            rows = self._attach_delegations(self.db.select_many("books", filters=filters))
            rows.sort(key=lambda row: row["total_delegations"], reverse=True)
            return rows[:limit]

        rows = self.db.select_many(
            "books",
            filters=filters,
            order_by=sort_by,
            descending=sort_by == "created_at",
            limit=limit,
        )
        return self._attach_delegations(rows)

    def get_bookmark(self, bookmark_id: str) -> dict[str, Any]:
        row = self.db.select_one("books", {"id": bookmark_id}, not_found_label="Bookmark")
        return self._attach_delegations([row])[0]

    def create_bookmark(
        self,
        user_id: str,
        title: str,
        author: str,
        description: str | None = None,
        cover_url: str | None = None,
    ) -> dict[str, Any]:
        """Insert a bookmark owned by ``user_id``."""
        created = self.db.insert_one(
            "books",
            {
                "title": title,
                "author": author,
                "description": description or None,
                "cover_url": cover_url or None,
                "added_by": user_id,
            },
        )
        logger.info("Bookmark %s created by user=%s", created.get("id"), user_id)
        return created

    def _owned_bookmark(self, user_id: str, bookmark_id: str) -> dict[str, Any]:
        row = self.db.select_one("books", {"id": bookmark_id}, not_found_label="Bookmark")
        if str(row.get("added_by")) != str(user_id):
            raise ForbiddenError("You can only modify your own bookmarks")
        return row

    def update_bookmark(
        self,
        user_id: str,
        bookmark_id: str,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        """Apply an allow-listed patch to a bookmark the user owns."""
        if not changes:
            raise InvalidInputError("No valid fields to update")
        self._owned_bookmark(user_id, bookmark_id)

        rows = self.db.update(
            "books",
            {"id": bookmark_id},
            {**changes, "updated_at": now_utc().isoformat()},
        )
        if not rows:
            raise NotFoundError("Bookmark")
        return rows[0]

    def delete_bookmark(self, user_id: str, bookmark_id: str) -> None:
        self._owned_bookmark(user_id, bookmark_id)
        self.db.delete("books", {"id": bookmark_id})
        logger.info("Bookmark %s deleted by user=%s", bookmark_id, user_id)
