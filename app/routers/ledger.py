"""Token balance and award endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header

from app.dependencies import get_caller_context, get_current_user_id, get_ledger_store, get_session
from app.schemas.ledger import TokenAwardRequest, TokenAwardResponse, TokenBalanceResponse
from app.services.auth_service import SessionInfo
from app.services.ledger_service import CallerContext, LedgerService
from app.services.ledger_store import LedgerStore

router = APIRouter()


@router.get("/token-balance", response_model=TokenBalanceResponse)
def get_token_balance(
    session: SessionInfo = Depends(get_session),
    store: LedgerStore = Depends(get_ledger_store),
) -> dict:
    """Return current user's balance and recent transactions."""
    return LedgerService(store).get_balance(get_current_user_id(session))


@router.post("/token-award", response_model=TokenAwardResponse)
def award_tokens(
    payload: TokenAwardRequest,
    idempotency_key: str | None = Header(None),
    caller: CallerContext = Depends(get_caller_context),
    store: LedgerStore = Depends(get_ledger_store),
) -> dict:
    """Credit tokens to a user; users may only credit themselves."""
    balance = LedgerService(store).award(
        caller,
        user_id=payload.user_id,
        amount=payload.amount,
        reason=payload.reason,
        related_entity_id=payload.related_entity_id,
        related_entity_type=payload.related_entity_type,
        idempotency_key=idempotency_key,
    )
    return {"success": True, "balance": balance.amount}
