"""Wallet authentication endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.dependencies import get_db_client, get_session_service
from app.schemas.auth import WalletAuthRequest, WalletAuthResponse
from app.services.auth_service import AuthService, SessionService
from supabase import Client

router = APIRouter()


@router.post("", response_model=WalletAuthResponse, response_model_by_alias=True)
def wallet_login(
    payload: WalletAuthRequest,
    client: Client = Depends(get_db_client),
    sessions: SessionService = Depends(get_session_service),
) -> dict:
    """Verify a wallet signature and open a session for its owner."""
    service = AuthService(client, sessions=sessions)
    return service.login(
        wallet_address=payload.wallet_address,
        signature=payload.signature,
        message=payload.message,
    )
