"""User-related schemas."""

from datetime import datetime

from pydantic import BaseModel


class UserResponse(BaseModel):
    """Public user profile with the current token balance."""

    id: str
    wallet_address: str
    username: str | None = None
    farcaster_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    token_balance: int = 0


class UserPatch(BaseModel):
    """Fields a user may change on their own profile."""

    username: str | None = None
    farcaster_id: str | None = None

    def changes(self) -> dict:
        """Return only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)
