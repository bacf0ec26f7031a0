"""Wallet signature login and signed session tokens."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Any

from eth_account import Account
from eth_account.messages import encode_defunct
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from app.config import settings
from app.services.common import SupabaseService
from app.utils.errors import InvalidInputError, StoreError, UnauthorizedError
from supabase import Client

logger = logging.getLogger(__name__)

SESSION_SALT = "bookmark-ledger-session"


@dataclass(frozen=True)
class SessionInfo:
    """Result of validating a bearer token."""

    valid: bool
    user_id: str | None = None
    wallet_address: str | None = None


INVALID_SESSION = SessionInfo(valid=False)


class SessionService:
    """Issue and validate signed, expiring session tokens."""

    def __init__(self, secret_key: str | None = None, ttl_seconds: int | None = None) -> None:
        self.ttl_seconds = ttl_seconds or settings.session_ttl_seconds
        self.serializer = URLSafeTimedSerializer(
            secret_key or settings.session_secret_key,
            salt=SESSION_SALT,
            signer_kwargs={"key_derivation": "hmac", "digest_method": hashlib.sha256},
        )

    def issue(self, user_id: str, wallet_address: str) -> str:
        """Return a token carrying the user id and wallet address."""
        return self.serializer.dumps({"uid": str(user_id), "wallet": wallet_address})

    def validate(self, token: str) -> SessionInfo:
        """Return ``SessionInfo(valid=True, ...)`` for a good, unexpired token."""
        if not token:
            return INVALID_SESSION
        try:
            payload = self.serializer.loads(token, max_age=self.ttl_seconds)
        except SignatureExpired:
            logger.info("Rejected expired session token")
            return INVALID_SESSION
        except BadSignature:
            return INVALID_SESSION

        if not isinstance(payload, dict) or not payload.get("uid"):
            return INVALID_SESSION
        return SessionInfo(
            valid=True,
            user_id=str(payload["uid"]),
            wallet_address=payload.get("wallet"),
        )


def recover_wallet_address(message: str, signature: str) -> str:
    """Recover the signer address of an EIP-191 personal message."""
    return Account.recover_message(encode_defunct(text=message), signature=signature)


class AuthService:
    """Wallet login: verify the signature, find or create the user, open a session."""

    def __init__(self, client: Client, sessions: SessionService | None = None) -> None:
        self.db = SupabaseService(client)
        self.sessions = sessions or SessionService()

    def login(self, wallet_address: str, signature: str, message: str) -> dict[str, Any]:
        """Authenticate a wallet and return ``{success, userId, token}``."""
        if not wallet_address or not signature or not message:
            raise InvalidInputError("Missing required fields")

        wallet = wallet_address.strip().lower()
        try:
            recovered = recover_wallet_address(message, signature)
        except Exception as exc:
            raise UnauthorizedError("Invalid signature") from exc
        if recovered.lower() != wallet:
            raise UnauthorizedError("Invalid signature")

        user = self._find_or_create_user(wallet)
        user_id = str(user["id"])
        logger.info("Wallet login user=%s", user_id)
        return {
            "success": True,
            "userId": user_id,
            "token": self.sessions.issue(user_id, wallet),
        }

    def _find_or_create_user(self, wallet: str) -> dict[str, Any]:
        existing = self.db.select_first("users", {"wallet_address": wallet}, columns="id")
        if existing:
            return existing

        try:
            return self.db.insert_one("users", {"wallet_address": wallet})
        except StoreError:
            # A concurrent login may have created the row first.
            created = self.db.select_first("users", {"wallet_address": wallet}, columns="id")
            if created:
                return created
            raise
