"""User profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user_id, get_db_client, get_ledger_store, get_session
from app.schemas.user import UserPatch, UserResponse
from app.services.auth_service import SessionInfo
from app.services.ledger_service import LedgerService
from app.services.ledger_store import LedgerStore
from app.services.user_service import UserService
from supabase import Client

router = APIRouter()


@router.get("", response_model=UserResponse)
def get_profile(
    session: SessionInfo = Depends(get_session),
    client: Client = Depends(get_db_client),
    store: LedgerStore = Depends(get_ledger_store),
) -> dict:
    """Return the current user's profile and token balance."""
    service = UserService(client, ledger=LedgerService(store))
    return service.get_profile(get_current_user_id(session))


@router.put("")
def update_profile(
    payload: UserPatch,
    session: SessionInfo = Depends(get_session),
    client: Client = Depends(get_db_client),
    store: LedgerStore = Depends(get_ledger_store),
) -> dict:
    """Update username or Farcaster id."""
    service = UserService(client, ledger=LedgerService(store))
    return service.update_profile(get_current_user_id(session), payload.changes())
