"""Pytest fixtures for backend tests."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from tests.fakes import FakeSupabase

SYSTEM_KEY = "test-system-key"


def _set_default_env() -> None:
    os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
    os.environ.setdefault("SUPABASE_SERVICE_KEY", "service-key")
    os.environ.setdefault("ENABLE_SCHEDULER", "false")
    os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")
    os.environ.setdefault("SYSTEM_OPERATION_KEY", SYSTEM_KEY)
    os.environ.setdefault("LEDGER_BACKEND", "memory")
    os.environ.setdefault("USER_CACHE_TTL_SECONDS", "0")


# Settings are read at import time, so the env must exist before test modules
# import anything from ``app``.
_set_default_env()


@pytest.fixture
def fake_db() -> FakeSupabase:
    """Empty fake database; tests seed the tables they need."""
    return FakeSupabase()


@pytest.fixture
def ledger_store():
    """Fresh in-memory ledger per test."""
    from app.services.ledger_store import InMemoryLedgerStore

    return InMemoryLedgerStore()


@pytest.fixture
def client(fake_db: FakeSupabase, ledger_store) -> Iterator[TestClient]:
    """Create a FastAPI test client wired to the fake database and ledger."""
    from app.dependencies import get_db_client, get_ledger_store
    from app.main import app

    app.dependency_overrides[get_db_client] = lambda: fake_db
    app.dependency_overrides[get_ledger_store] = lambda: ledger_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Build an Authorization header carrying a valid session for ``user_id``."""
    from app.dependencies import get_session_service

    def build(user_id: str, wallet: str = "0xabc") -> dict[str, str]:
        token = get_session_service().issue(user_id, wallet)
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def system_headers() -> dict[str, str]:
    """Headers identifying a trusted system caller."""
    return {"x-system-operation": "true", "x-system-key": SYSTEM_KEY}
