"""HTTP tests for /bookmarks."""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.fakes import FakeSupabase


def _seed(fake_db: FakeSupabase) -> None:
    fake_db.tables["books"] = [
        {"id": "b1", "title": "Dune", "author": "Herbert", "added_by": "u1",
         "created_at": "2026-01-01T00:00:00+00:00"},
        {"id": "b2", "title": "Anathem", "author": "Stephenson", "added_by": "u2",
         "created_at": "2026-01-02T00:00:00+00:00"},
        {"id": "b3", "title": "Carrie", "author": "King", "added_by": "u1",
         "created_at": "2026-01-03T00:00:00+00:00"},
    ]
    fake_db.tables["stakes"] = [
        {"id": "s1", "bookmark_id": "b1", "user_id": "u2", "amount": 4},
        {"id": "s2", "bookmark_id": "b1", "user_id": "u3", "amount": 6},
        {"id": "s3", "bookmark_id": "b2", "user_id": "u1", "amount": 3},
    ]


def test_list_defaults_to_newest_first(client: TestClient, fake_db: FakeSupabase) -> None:
    """Anonymous listing works and carries delegation totals."""
    _seed(fake_db)
    response = client.get("/bookmarks")
    assert response.status_code == 200
    bookmarks = response.json()["bookmarks"]
    assert [row["id"] for row in bookmarks] == ["b3", "b2", "b1"]
    totals = {row["id"]: row["total_delegations"] for row in bookmarks}
    assert totals == {"b1": 10, "b2": 3, "b3": 0}


def test_sort_by_total_delegations(client: TestClient, fake_db: FakeSupabase) -> None:
    """Bookmarks can be ranked by staked tokens."""
    _seed(fake_db)
    response = client.get("/bookmarks", params={"sortBy": "total_delegations", "limit": 2})
    assert [row["id"] for row in response.json()["bookmarks"]] == ["b1", "b2"]


def test_sort_by_title_and_invalid_sort(client: TestClient, fake_db: FakeSupabase) -> None:
    """Title sort is ascending; unknown sort keys are rejected."""
    _seed(fake_db)
    response = client.get("/bookmarks", params={"sortBy": "title"})
    assert [row["title"] for row in response.json()["bookmarks"]] == ["Anathem", "Carrie", "Dune"]

    response = client.get("/bookmarks", params={"sortBy": "votes"})
    assert response.status_code == 400


def test_user_only_requires_auth(client: TestClient, fake_db: FakeSupabase, auth_headers) -> None:
    """userOnly filters to the caller's bookmarks and needs a session."""
    _seed(fake_db)
    assert client.get("/bookmarks", params={"userOnly": "true"}).status_code == 401

    response = client.get("/bookmarks", params={"userOnly": "true"}, headers=auth_headers("u1"))
    assert {row["id"] for row in response.json()["bookmarks"]} == {"b1", "b3"}


def test_get_single_bookmark(client: TestClient, fake_db: FakeSupabase) -> None:
    """?id= returns one bookmark or 404."""
    _seed(fake_db)
    response = client.get("/bookmarks", params={"id": "b1"})
    assert response.json()["bookmark"]["total_delegations"] == 10

    response = client.get("/bookmarks", params={"id": "missing"})
    assert response.status_code == 404
    assert response.json()["error"] == "Bookmark not found"


def test_create_bookmark(client: TestClient, fake_db: FakeSupabase, auth_headers) -> None:
    """Creating needs a session plus title and author."""
    body = {"title": "Solaris", "author": "Lem"}
    assert client.post("/bookmarks", json=body).status_code == 401

    response = client.post("/bookmarks", json=body, headers=auth_headers("u1"))
    assert response.status_code == 201
    assert response.json()["added_by"] == "u1"
    assert fake_db.rows("books")[0]["title"] == "Solaris"

    response = client.post("/bookmarks", json={"title": "No author"}, headers=auth_headers("u1"))
    assert response.status_code == 400


def test_update_only_own_bookmark(client: TestClient, fake_db: FakeSupabase, auth_headers) -> None:
    """Owners may patch allow-listed fields; others get 403."""
    _seed(fake_db)
    response = client.put(
        "/bookmarks",
        params={"id": "b1"},
        json={"title": "Dune Messiah", "added_by": "u2"},
        headers=auth_headers("u1"),
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Dune Messiah"
    assert response.json()["added_by"] == "u1"

    response = client.put(
        "/bookmarks", params={"id": "b1"}, json={"title": "Mine"}, headers=auth_headers("u2")
    )
    assert response.status_code == 403

    response = client.put("/bookmarks", params={"id": "b1"}, json={}, headers=auth_headers("u1"))
    assert response.status_code == 400


def test_delete_bookmark(client: TestClient, fake_db: FakeSupabase, auth_headers) -> None:
    """Only the owner can delete; missing rows are 404."""
    _seed(fake_db)
    assert client.delete("/bookmarks", params={"id": "b2"}, headers=auth_headers("u1")).status_code == 403

    response = client.delete("/bookmarks", params={"id": "b2"}, headers=auth_headers("u2"))
    assert response.json() == {"success": True}
    assert [row["id"] for row in fake_db.rows("books")] == ["b1", "b3"]

    assert client.delete("/bookmarks", params={"id": "b2"}, headers=auth_headers("u2")).status_code == 404


def test_database_failure_is_generic_500(client: TestClient, fake_db: FakeSupabase) -> None:
    """PostgREST errors are logged and never echoed to the client."""
    fake_db.failing_tables.add("books")
    response = client.get("/bookmarks")
    assert response.status_code == 500
    assert response.json() == {"error": "Database request failed", "code": "STORE_ERROR"}


def test_update_rejects_null_title_or_author(
    client: TestClient,
    fake_db: FakeSupabase,
    auth_headers,
) -> None:
    """title and author stay required; an explicit null is a 400."""
    _seed(fake_db)
    for body in ({"title": None}, {"author": None, "description": "x"}):
        response = client.put("/bookmarks", params={"id": "b1"}, json=body, headers=auth_headers("u1"))
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"
    assert fake_db.rows("books")[0]["title"] == "Dune"
    assert fake_db.rows("books")[0]["author"] == "Herbert"
