"""Bookmark schemas."""

from pydantic import BaseModel, Field, field_validator


class BookmarkCreate(BaseModel):
    """Request body for creating a bookmark."""

    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    description: str | None = None
    cover_url: str | None = None


class BookmarkPatch(BaseModel):
    """Fields a bookmark owner may change. Anything else in the body is ignored."""

    title: str | None = Field(default=None, min_length=1)
    author: str | None = Field(default=None, min_length=1)
    description: str | None = None
    cover_url: str | None = None

    @field_validator("title", "author")
    @classmethod
    def reject_null(cls, value: str | None) -> str:
        # Omit the field to leave it unchanged; null would clear a required column.
        if value is None:
            raise ValueError("cannot be null")
        return value

    def changes(self) -> dict:
        """Return only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)
