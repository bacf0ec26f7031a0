"""Token award and balance service."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from app.config import settings
from app.services.ledger_store import CREDIT, Balance, LedgerStore
from app.utils.errors import (
    ForbiddenError,
    InvalidAmountError,
    InvalidInputError,
    LedgerWriteFailedError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerContext:
    """Who is asking for a ledger write.

    System callers (rewards engine, airdrops, scheduled jobs) may credit any
    user. Authenticated users may only credit themselves.
    """

    user_id: str | None = None
    is_system: bool = False

    @classmethod
    def system(cls) -> CallerContext:
        return cls(is_system=True)

    @classmethod
    def for_user(cls, user_id: str) -> CallerContext:
        return cls(user_id=str(user_id))


def validate_amount(amount: Any) -> int:
    """Return ``amount`` as an int, or raise when it is not a positive integer."""
    if isinstance(amount, bool) or not isinstance(amount, int | float):
        raise InvalidAmountError()
    if isinstance(amount, float):
        if not math.isfinite(amount) or not amount.is_integer():
            raise InvalidAmountError()
        amount = int(amount)
    if amount <= 0:
        raise InvalidAmountError()
    return amount


class LedgerService:
    """Award tokens and read balances on top of a ``LedgerStore``."""

    def __init__(self, store: LedgerStore, recent_limit: int | None = None) -> None:
        self.store = store
        self.recent_limit = recent_limit or settings.ledger_recent_transactions_limit

    @staticmethod
    def authorize(caller: CallerContext, user_id: str) -> None:
        """Raise ForbiddenError unless ``caller`` may credit ``user_id``."""
        if caller.is_system:
            return
        if not caller.user_id or caller.user_id != str(user_id):
            raise ForbiddenError("You can only award tokens to yourself")

    def award(
        self,
        caller: CallerContext,
        user_id: str,
        amount: Any,
        reason: str,
        related_entity_id: str | None = None,
        related_entity_type: str | None = None,
        idempotency_key: str | None = None,
    ) -> Balance:
        """Credit ``amount`` tokens to ``user_id`` and return the new balance.

        The log append and the balance update commit together or not at all.
        When ``idempotency_key`` matches an earlier award for the same user,
        nothing is written and the current balance is returned.

        Raises:
            InvalidInputError: missing user id or reason.
            InvalidAmountError: amount is not a positive integer.
            ForbiddenError: a user tried to credit someone else.
            LedgerWriteFailedError: the unit of work could not be committed.
        """
        user_id = str(user_id or "").strip()
        if not user_id:
            raise InvalidInputError("userId is required")
        awarded = validate_amount(amount)
        reason = (reason or "").strip()
        if not reason:
            raise InvalidInputError("reason is required")
        key = idempotency_key.strip() if idempotency_key else None

        self.authorize(caller, user_id)

        try:
            with self.store.unit_of_work() as uow:
                uow.append_transaction(
                    user_id=user_id,
                    amount=awarded,
                    entry_type=CREDIT,
                    reason=reason,
                    related_entity_id=related_entity_id,
                    related_entity_type=related_entity_type,
                    idempotency_key=key or None,
                )
                uow.adjust_balance(user_id, awarded)
                result = uow.commit()
        except Exception as exc:
            logger.exception("Token award failed for user=%s amount=%s", user_id, awarded)
            raise LedgerWriteFailedError() from exc

        balance = result.balance_for(user_id)
        if result.replayed:
            logger.info("Token award replayed user=%s key=%s", user_id, key)
        else:
            logger.info(
                "Awarded %s tokens to user=%s reason=%s system=%s balance=%s",
                awarded,
                user_id,
                reason,
                caller.is_system,
                balance.amount,
            )
        return balance

    def current_amount(self, user_id: str) -> int:
        """Return the balance amount, zero when the user was never credited."""
        balance = self.store.get_balance(str(user_id))
        return balance.amount if balance else 0

    def get_balance(self, user_id: str) -> dict[str, Any]:
        """Return the balance plus the most recent transactions, newest first.

        Both come from a single store read, so the listed transactions always
        match the returned balance.
        """
        snapshot = self.store.snapshot(str(user_id), self.recent_limit)
        return {
            "balance": snapshot.balance.amount if snapshot.balance else 0,
            "transactions": [tx.to_dict() for tx in snapshot.transactions[: self.recent_limit]],
        }
