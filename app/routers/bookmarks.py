"""Bookmark endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_current_user_id, get_db_client, get_optional_session, get_session
from app.schemas.bookmark import BookmarkCreate, BookmarkPatch
from app.services.auth_service import SessionInfo
from app.services.bookmark_service import BookmarkService
from app.utils.errors import UnauthorizedError
from supabase import Client

router = APIRouter()


@router.get("")
def list_bookmarks(
    user_only: bool = Query(default=False, alias="userOnly"),
    sort_by: str = Query(default="created_at", alias="sortBy"),
    limit: int = Query(default=50, ge=1, le=200),
    bookmark_id: str | None = Query(default=None, alias="id"),
    session: SessionInfo | None = Depends(get_optional_session),
    client: Client = Depends(get_db_client),
) -> dict:
    """List bookmarks, or return one bookmark when ``id`` is given."""
    service = BookmarkService(client)
    if bookmark_id:
        return {"bookmark": service.get_bookmark(bookmark_id)}

    if user_only and session is None:
        raise UnauthorizedError("Authentication required")
    owner_id = get_current_user_id(session) if user_only and session else None
    bookmarks = service.list_bookmarks(user_id=owner_id, sort_by=sort_by, limit=limit)
    return {"bookmarks": bookmarks}


@router.post("", status_code=201)
def create_bookmark(
    payload: BookmarkCreate,
    session: SessionInfo = Depends(get_session),
    client: Client = Depends(get_db_client),
) -> dict:
    """Create a bookmark owned by the current user."""
    service = BookmarkService(client)
    return service.create_bookmark(
        user_id=get_current_user_id(session),
        title=payload.title,
        author=payload.author,
        description=payload.description,
        cover_url=payload.cover_url,
    )


@router.put("")
def update_bookmark(
    payload: BookmarkPatch,
    bookmark_id: str = Query(..., alias="id", min_length=1),
    session: SessionInfo = Depends(get_session),
    client: Client = Depends(get_db_client),
) -> dict:
    """Update a bookmark the current user owns."""
    service = BookmarkService(client)
    return service.update_bookmark(
        user_id=get_current_user_id(session),
        bookmark_id=bookmark_id,
        changes=payload.changes(),
    )


@router.delete("")
def delete_bookmark(
    bookmark_id: str = Query(..., alias="id", min_length=1),
    session: SessionInfo = Depends(get_session),
    client: Client = Depends(get_db_client),
) -> dict:
    """Delete a bookmark the current user owns."""
    BookmarkService(client).delete_bookmark(get_current_user_id(session), bookmark_id)
    return {"success": True}
