"""User profile service."""

from __future__ import annotations

from typing import Any

from app.services.common import SupabaseService, invalidate_user_cache
from app.services.ledger_service import LedgerService
from app.utils.errors import InvalidInputError, NotFoundError
from app.utils.time import now_utc
from supabase import Client


class UserService:
    """Read and update the authenticated user's profile."""

    def __init__(self, client: Client, ledger: LedgerService) -> None:
        self.db = SupabaseService(client)
        self.ledger = ledger

    def get_profile(self, user_id: str) -> dict[str, Any]:
        """Return the user row with the current ``token_balance``."""
        user = self.db.get_user(user_id)
        user["token_balance"] = self.ledger.current_amount(user_id)
        return user

    def update_profile(self, user_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        if not changes:
            raise InvalidInputError("No valid fields to update")

        rows = self.db.update(
            "users",
            {"id": user_id},
            {**changes, "updated_at": now_utc().isoformat()},
        )
        invalidate_user_cache(user_id)
        if not rows:
            raise NotFoundError("User")
        return rows[0]
