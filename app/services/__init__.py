"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "AuthService": "app.services.auth_service",
    "BisacCatalog": "app.services.bisac_service",
    "BookmarkService": "app.services.bookmark_service",
    "CallerContext": "app.services.ledger_service",
    "InMemoryLedgerStore": "app.services.ledger_store",
    "LeaderboardService": "app.services.leaderboard_service",
    "LedgerService": "app.services.ledger_service",
    "MetadataRegistry": "app.services.metadata_service",
    "SessionService": "app.services.auth_service",
    "SupabaseLedgerStore": "app.services.ledger_store",
    "SupabaseService": "app.services.common",
    "UserService": "app.services.user_service",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
