"""HTTP tests for /user."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.fakes import FakeSupabase


def test_profile_includes_token_balance(
    client: TestClient,
    fake_db: FakeSupabase,
    auth_headers,
    system_headers,
) -> None:
    """GET /user returns the row plus the ledger balance."""
    fake_db.tables["users"] = [{"id": "u1", "wallet_address": "0xabc", "username": None}]
    headers = auth_headers("u1")

    assert client.get("/user", headers=headers).json()["token_balance"] == 0

    client.post(
        "/token-award",
        json={"userId": "u1", "amount": 15, "reason": "welcome"},
        headers=system_headers,
    )
    profile = client.get("/user", headers=headers).json()
    assert profile["wallet_address"] == "0xabc"
    assert profile["token_balance"] == 15


def test_profile_requires_auth_and_existing_user(client: TestClient, auth_headers) -> None:
    """Anonymous callers get 401, unknown users 404."""
    assert client.get("/user").status_code == 401
    assert client.get("/user", headers=auth_headers("ghost")).status_code == 404


def test_update_profile(client: TestClient, fake_db: FakeSupabase, auth_headers) -> None:
    """Only username and farcaster_id can change; an empty patch is 400."""
    fake_db.tables["users"] = [{"id": "u1", "wallet_address": "0xabc", "username": None}]
    headers = auth_headers("u1")

    response = client.put(
        "/user",
        json={"username": "reader", "wallet_address": "0xevil"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["username"] == "reader"
    assert fake_db.rows("users")[0]["wallet_address"] == "0xabc"
    assert "updated_at" in fake_db.rows("users")[0]

    assert client.put("/user", json={}, headers=headers).status_code == 400
