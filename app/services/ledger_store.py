"""Token ledger persistence: balances, the transaction log and units of work.

A unit of work stages a batch of log appends and balance deltas and applies
them in one atomic step on ``commit()``. Leaving the ``with`` block without
committing, or raising inside it, rolls the staged writes back, so a log entry
can never be persisted without its balance update (or the reverse).

Two stores exist:

* ``SupabaseLedgerStore`` sends the staged batch to the ``apply_ledger_writes``
  Postgres function (``supabase/migrations``), which runs in a single database
  transaction and increments balances with ``insert ... on conflict do update``
  so concurrent credits never lose an update.
* ``InMemoryLedgerStore`` keeps everything in process and serialises commits
  with a lock. It backs ``LEDGER_BACKEND=memory`` for local development.
"""

from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from app.services.common import SupabaseService
from app.utils.time import now_utc, parse_timestamp
from supabase import Client

logger = logging.getLogger(__name__)

CREDIT = "credit"
DEBIT = "debit"
ENTRY_TYPES = (CREDIT, DEBIT)


@dataclass(frozen=True)
class Balance:
    """Current token amount held by one user."""

    user_id: str
    amount: int
    updated_at: datetime | None = None

    @classmethod
    def empty(cls, user_id: str) -> Balance:
        return cls(user_id=user_id, amount=0)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Balance:
        return cls(
            user_id=str(row["user_id"]),
            amount=int(row.get("amount") or 0),
            updated_at=parse_timestamp(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "amount": self.amount,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class LedgerTransaction:
    """One immutable credit or debit event."""

    id: str
    user_id: str
    amount: int
    type: str
    reason: str
    created_at: datetime
    related_entity_id: str | None = None
    related_entity_type: str | None = None
    idempotency_key: str | None = None

    @property
    def signed_amount(self) -> int:
        return self.amount if self.type == CREDIT else -self.amount

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> LedgerTransaction:
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            amount=int(row["amount"]),
            type=str(row["type"]),
            reason=str(row["reason"]),
            created_at=parse_timestamp(row.get("created_at")) or now_utc(),
            related_entity_id=row.get("related_entity_id"),
            related_entity_type=row.get("related_entity_type"),
            idempotency_key=row.get("idempotency_key"),
        )

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["created_at"] = self.created_at.isoformat()
        payload.pop("idempotency_key", None)
        return payload


@dataclass(frozen=True)
class StagedTransaction:
    """A transaction log row waiting for its unit of work to commit."""

    user_id: str
    amount: int
    type: str
    reason: str
    related_entity_id: str | None = None
    related_entity_type: str | None = None
    idempotency_key: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class CommitResult:
    """Post-commit balances for every user touched by a unit of work.

    ``replayed`` is True when an idempotency key matched an earlier commit and
    nothing new was written.
    """

    balances: dict[str, Balance] = field(default_factory=dict)
    replayed: bool = False

    def balance_for(self, user_id: str) -> Balance:
        return self.balances.get(user_id) or Balance.empty(user_id)


@dataclass(frozen=True)
class LedgerSnapshot:
    """A balance and its most recent transactions read at the same instant."""

    balance: Balance | None
    transactions: list[LedgerTransaction] = field(default_factory=list)


class LedgerUnitOfWork(ABC):
    """Scoped, all-or-nothing batch of ledger writes."""

    def __init__(self) -> None:
        self._transactions: list[StagedTransaction] = []
        self._deltas: dict[str, int] = {}
        self._state = "open"

    @property
    def state(self) -> str:
        return self._state

    def append_transaction(
        self,
        user_id: str,
        amount: int,
        entry_type: str,
        reason: str,
        related_entity_id: str | None = None,
        related_entity_type: str | None = None,
        idempotency_key: str | None = None,
    ) -> None:
        """Stage one log entry; ``amount`` is a positive magnitude."""
        self._ensure_open()
        if entry_type not in ENTRY_TYPES:
            raise ValueError(f"Unknown ledger entry type: {entry_type}")
        self._transactions.append(
            StagedTransaction(
                user_id=user_id,
                amount=amount,
                type=entry_type,
                reason=reason,
                related_entity_id=related_entity_id,
                related_entity_type=related_entity_type,
                idempotency_key=idempotency_key,
            )
        )

    def adjust_balance(self, user_id: str, delta: int) -> None:
        """Stage a signed change to a user's balance row."""
        self._ensure_open()
        self._deltas[user_id] = self._deltas.get(user_id, 0) + delta

    def commit(self) -> CommitResult:
        """Apply every staged write atomically."""
        self._ensure_open()
        try:
            result = self._commit(list(self._transactions), dict(self._deltas))
        except Exception:
            self._discard("rolled_back")
            raise
        self._discard("committed")
        return result

    def rollback(self) -> None:
        """Discard staged writes. A no-op once committed or rolled back."""
        if self._state == "open":
            self._discard("rolled_back")

    def __enter__(self) -> LedgerUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._state == "open":
            if exc_type is None:
                logger.warning("Ledger unit of work left without commit; rolling back")
            self.rollback()

    def _ensure_open(self) -> None:
        if self._state != "open":
            raise RuntimeError(f"Unit of work already {self._state}")

    def _discard(self, state: str) -> None:
        self._transactions.clear()
        self._deltas.clear()
        self._state = state

    @abstractmethod
    def _commit(
        self,
        transactions: list[StagedTransaction],
        deltas: dict[str, int],
    ) -> CommitResult:
        """Persist the batch in one atomic step."""


class LedgerStore(ABC):
    """Backing storage for balances and the transaction log."""

    @abstractmethod
    def unit_of_work(self) -> LedgerUnitOfWork:
        """Open a new unit of work."""

    @abstractmethod
    def get_balance(self, user_id: str) -> Balance | None:
        """Return the balance row for ``user_id`` or None when absent."""

    @abstractmethod
    def recent_transactions(self, user_id: str, limit: int) -> list[LedgerTransaction]:
        """Return up to ``limit`` transactions, newest first."""

    @abstractmethod
    def snapshot(self, user_id: str, limit: int) -> LedgerSnapshot:
        """Return the balance and up to ``limit`` newest transactions in one read."""


class _SupabaseUnitOfWork(LedgerUnitOfWork):
    def __init__(self, db: SupabaseService) -> None:
        super().__init__()
        self.db = db

    def _commit(
        self,
        transactions: list[StagedTransaction],
        deltas: dict[str, int],
    ) -> CommitResult:
        rows = self.db.execute(
            self.db.client.rpc(
                "apply_ledger_writes",
                {
                    "p_transactions": [staged.to_payload() for staged in transactions],
                    "p_balance_deltas": [
                        {"user_id": user_id, "delta": delta} for user_id, delta in deltas.items()
                    ],
                },
            ),
            default=[],
        )
        balances = {str(row["user_id"]): Balance.from_row(row) for row in rows}
        replayed = any(bool(row.get("replayed")) for row in rows)
        return CommitResult(balances=balances, replayed=replayed)


class SupabaseLedgerStore(LedgerStore):
    """Ledger tables in Supabase (``token_balances``, ``token_transactions``)."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def unit_of_work(self) -> LedgerUnitOfWork:
        return _SupabaseUnitOfWork(self.db)

    def get_balance(self, user_id: str) -> Balance | None:
        row = self.db.select_first(
            "token_balances",
            {"user_id": user_id},
            columns="user_id,amount,updated_at",
        )
        return Balance.from_row(row) if row else None

    def recent_transactions(self, user_id: str, limit: int) -> list[LedgerTransaction]:
        rows = self.db.select_many(
            "token_transactions",
            filters={"user_id": user_id},
            order_by="created_at",
            descending=True,
            limit=limit,
        )
        return [LedgerTransaction.from_row(row) for row in rows]

    def snapshot(self, user_id: str, limit: int) -> LedgerSnapshot:
        payload = self.db.execute(
            self.db.client.rpc("ledger_snapshot", {"p_user_id": user_id, "p_limit": limit}),
        ) or {}
        balance_row = payload.get("balance")
        return LedgerSnapshot(
            balance=Balance.from_row(balance_row) if balance_row else None,
            transactions=[
                LedgerTransaction.from_row(row) for row in payload.get("transactions") or []
            ],
        )


class _InMemoryUnitOfWork(LedgerUnitOfWork):
    def __init__(self, store: InMemoryLedgerStore) -> None:
        super().__init__()
        self.store = store

    def _commit(
        self,
        transactions: list[StagedTransaction],
        deltas: dict[str, int],
    ) -> CommitResult:
        return self.store._apply(transactions, deltas)


class InMemoryLedgerStore(LedgerStore):
    """Process-local ledger with lock-serialised, snapshot-restoring commits."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._balances: dict[str, Balance] = {}
        self._transactions: list[LedgerTransaction] = []

    def unit_of_work(self) -> LedgerUnitOfWork:
        return _InMemoryUnitOfWork(self)

    def get_balance(self, user_id: str) -> Balance | None:
        with self._lock:
            return self._balances.get(user_id)

    def recent_transactions(self, user_id: str, limit: int) -> list[LedgerTransaction]:
        with self._lock:
            # The log is append-only, so reverse insertion order is newest first.
            rows = [tx for tx in reversed(self._transactions) if tx.user_id == user_id]
        return rows[:limit]

    def snapshot(self, user_id: str, limit: int) -> LedgerSnapshot:
        with self._lock:
            balance = self._balances.get(user_id)
            rows = [tx for tx in reversed(self._transactions) if tx.user_id == user_id]
        return LedgerSnapshot(balance=balance, transactions=rows[:limit])

    def transaction_count(self) -> int:
        with self._lock:
            return len(self._transactions)

    def _is_replay(self, transactions: list[StagedTransaction]) -> bool:
        keys = {
            (staged.user_id, staged.idempotency_key)
            for staged in transactions
            if staged.idempotency_key
        }
        if not keys:
            return False
        return any((tx.user_id, tx.idempotency_key) in keys for tx in self._transactions)

    def _apply(
        self,
        transactions: list[StagedTransaction],
        deltas: dict[str, int],
    ) -> CommitResult:
        with self._lock:
            if self._is_replay(transactions):
                return CommitResult(
                    balances={
                        user_id: self._balances.get(user_id) or Balance.empty(user_id)
                        for user_id in deltas
                    },
                    replayed=True,
                )

            balances_before = dict(self._balances)
            log_length = len(self._transactions)
            try:
                for staged in transactions:
                    self._append_transaction(staged)
                for user_id, delta in deltas.items():
                    self._apply_balance_delta(user_id, delta)
            except Exception:
                self._balances = balances_before
                del self._transactions[log_length:]
                raise

            return CommitResult(balances={user_id: self._balances[user_id] for user_id in deltas})

    def _append_transaction(self, staged: StagedTransaction) -> None:
        self._transactions.append(
            LedgerTransaction(
                id=str(uuid.uuid4()),
                user_id=staged.user_id,
                amount=staged.amount,
                type=staged.type,
                reason=staged.reason,
                created_at=now_utc(),
                related_entity_id=staged.related_entity_id,
                related_entity_type=staged.related_entity_type,
                idempotency_key=staged.idempotency_key,
            )
        )

    def _apply_balance_delta(self, user_id: str, delta: int) -> None:
        current = self._balances.get(user_id)
        amount = (current.amount if current else 0) + delta
        self._balances[user_id] = Balance(user_id=user_id, amount=amount, updated_at=now_utc())
