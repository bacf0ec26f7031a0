"""FastAPI dependency injection helpers."""

from __future__ import annotations

import hmac
import logging
from functools import lru_cache

from fastapi import Depends, Header, Request

from app.config import settings
from app.services.auth_service import SessionInfo, SessionService
from app.services.bisac_service import BisacCatalog, get_bisac_catalog
from app.services.ledger_service import CallerContext
from app.services.ledger_store import InMemoryLedgerStore, LedgerStore, SupabaseLedgerStore
from app.services.metadata_service import MetadataRegistry
from app.utils.errors import ForbiddenError, UnauthorizedError
from app.utils.supabase_client import get_service_client
from supabase import Client

logger = logging.getLogger(__name__)


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


@lru_cache(maxsize=1)
def get_session_service() -> SessionService:
    """Return the process-wide session token service."""
    return SessionService()


def get_session(
    authorization: str = Header(None),
    sessions: SessionService = Depends(get_session_service),
) -> SessionInfo:
    """Validate the bearer token from the Authorization header.

    Raises:
        UnauthorizedError: 401 if the header is missing, malformed, or
            the token cannot be validated.
    """
    token = _bearer_token(authorization)
    if token is None:
        raise UnauthorizedError("Authentication required")

    session = sessions.validate(token)
    if not session.valid or not session.user_id:
        raise UnauthorizedError("Invalid or expired session")
    return session


def get_optional_session(
    authorization: str = Header(None),
    sessions: SessionService = Depends(get_session_service),
) -> SessionInfo | None:
    """Return the session for public routes; None when no token was sent.

    A token that is present but invalid is still rejected with 401.
    """
    if _bearer_token(authorization) is None:
        return None
    return get_session(authorization=authorization, sessions=sessions)


def get_current_user_id(session: SessionInfo) -> str:
    """Extract a stable user id string from a validated session."""
    return str(session.user_id)


def is_system_operation(system_flag: str | None, system_key: str | None) -> bool:
    """Return True for a trusted system caller.

    The ``x-system-operation`` flag only counts when it comes with the shared
    ``x-system-key`` configured for this deployment.
    """
    if (system_flag or "").strip().lower() != "true":
        return False
    if not settings.system_operations_enabled:
        logger.warning("System operation requested but SYSTEM_OPERATION_KEY is not set")
        return False
    return hmac.compare_digest(
        (system_key or "").encode("utf-8"),
        settings.system_operation_key.strip().encode("utf-8"),
    )


def get_caller_context(
    authorization: str = Header(None),
    x_system_operation: str | None = Header(None),
    x_system_key: str | None = Header(None),
    sessions: SessionService = Depends(get_session_service),
) -> CallerContext:
    """Resolve a system caller or an authenticated user."""
    if is_system_operation(x_system_operation, x_system_key):
        return CallerContext.system()
    if x_system_operation and _bearer_token(authorization) is None:
        raise UnauthorizedError("Invalid system operation credentials")
    session = get_session(authorization=authorization, sessions=sessions)
    return CallerContext.for_user(get_current_user_id(session))


def require_system_caller(caller: CallerContext = Depends(get_caller_context)) -> CallerContext:
    """Allow only trusted system callers."""
    if not caller.is_system:
        raise ForbiddenError("System operation credentials required")
    return caller


def get_db_client() -> Client:
    """Return the privileged Supabase client used by backend services."""
    return get_service_client()


@lru_cache(maxsize=1)
def get_memory_ledger_store() -> InMemoryLedgerStore:
    """Return the process-local ledger used when LEDGER_BACKEND=memory."""
    return InMemoryLedgerStore()


def get_ledger_store() -> LedgerStore:
    """Return the configured ledger store."""
    if settings.ledger_backend == "memory":
        return get_memory_ledger_store()
    return SupabaseLedgerStore(get_service_client())


def get_metadata_registry(request: Request) -> MetadataRegistry:
    """Return the metadata schema registry owned by the running app."""
    return request.app.state.metadata_registry


def get_bisac() -> BisacCatalog:
    """Return the cached BISAC catalog."""
    return get_bisac_catalog()
