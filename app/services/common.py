"""Shared Supabase data access helpers."""

from __future__ import annotations

import logging
import threading
import time
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from postgrest import APIError

from app.config import settings
from app.utils.errors import NotFoundError, StoreError
from supabase import Client

logger = logging.getLogger(__name__)
_user_cache: dict[str, tuple[float, dict[str, Any]]] = {}
_cache_lock = threading.Lock()


def _cache_get(cache: dict[Any, tuple[float, Any]], key: Any) -> Any | None:
    now = time.monotonic()
    with _cache_lock:
        entry = cache.get(key)
        if not entry:
            return None
        expires_at, value = entry
        if expires_at <= now:
            cache.pop(key, None)
            return None
        return value


def _cache_set(
    cache: dict[Any, tuple[float, Any]],
    key: Any,
    value: Any,
    ttl_seconds: int,
) -> None:
    if ttl_seconds <= 0:
        return

    with _cache_lock:
        max_entries = max(100, settings.data_cache_max_entries)
        if len(cache) >= max_entries:
            oldest_key = next(iter(cache))
            cache.pop(oldest_key, None)
        cache[key] = (time.monotonic() + ttl_seconds, value)


def invalidate_user_cache(user_id: str) -> None:
    """Drop a cached user row after it has been modified."""
    with _cache_lock:
        _user_cache.pop(str(user_id), None)


class SupabaseService:
    """Thin helper wrapper around a Supabase client."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def execute(self, query, default: Any = None) -> Any:
        """Execute a Supabase query and normalize API errors.

        PostgREST failures are logged with their details and surfaced as a
        generic ``StoreError`` so nothing internal reaches the caller.
        """
        started = time.perf_counter()
        try:
            response = query.execute()
        except APIError as exc:
            logger.error(
                "Supabase request failed code=%s message=%s",
                getattr(exc, "code", None),
                getattr(exc, "message", exc),
            )
            raise StoreError() from exc

        elapsed_ms = (time.perf_counter() - started) * 1000
        threshold_ms = settings.slow_query_log_threshold_ms
        if threshold_ms > 0 and elapsed_ms >= threshold_ms:
            logger.warning("Slow Supabase query %.1fms", elapsed_ms)
        data = response.data
        return default if data is None and default is not None else data

    def select_one(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
        not_found_label: str | None = None,
    ) -> dict[str, Any]:
        """Select a single row and raise NotFoundError when missing."""
        row = self.select_first(table, filters, columns=columns)
        if row is None:
            label = not_found_label or table
            raise NotFoundError(label)
        return row

    def select_first(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Select a single row, returning None when nothing matches."""
        query = self.client.table(table).select(columns)
        for key, value in filters.items():
            query = query.eq(key, value)
        rows = self.execute(query.limit(1), default=[])
        return rows[0] if rows else None

    def select_many(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select many rows from a table with optional filters and paging."""
        query = self.client.table(table).select(columns)
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return self.execute(query, default=[])

    def select_in(
        self,
        table: str,
        column: str,
        values: Iterable[Any],
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """Select rows whose ``column`` is one of ``values``."""
        keys = list(dict.fromkeys(str(value) for value in values))
        if not keys:
            return []
        return self.execute(
            self.client.table(table).select(columns).in_(column, keys),
            default=[],
        )

    def insert_one(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return the created object."""
        rows = self.execute(self.client.table(table).insert(payload), default=[])
        if not rows:
            raise StoreError(f"Failed to insert into {table}")
        return rows[0]

    def insert_many(self, table: str, payloads: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert many rows and return inserted rows."""
        if not payloads:
            return []
        return self.execute(self.client.table(table).insert(payloads), default=[])

    def update(
        self,
        table: str,
        filters: dict[str, Any],
        payload: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Update rows by equality filters and return the updated rows."""
        query = self.client.table(table).update(payload)
        for key, value in filters.items():
            query = query.eq(key, value)
        return self.execute(query, default=[])

    def delete(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """Delete rows by equality filters and return removed rows."""
        query = self.client.table(table).delete()
        for key, value in filters.items():
            query = query.eq(key, value)
        return self.execute(query, default=[])

    def get_user(self, user_id: str) -> dict[str, Any]:
        """Return a public user record."""
        cache_key = str(user_id)
        cached_user = _cache_get(_user_cache, cache_key)
        if cached_user is not None:
            return dict(cached_user)

        user = self.select_one("users", {"id": user_id}, not_found_label="User")
        _cache_set(_user_cache, cache_key, dict(user), settings.user_cache_ttl_seconds)
        return user


def group_by(rows: list[dict[str, Any]], key: str) -> dict[str, list[dict[str, Any]]]:
    """Group rows by an arbitrary key."""
    grouped: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for row in rows:
        grouped[str(row[key])].append(row)
    return grouped
