"""API router package."""

from app.routers import auth, bisac, bookmarks, leaderboard, ledger, metadata, user

__all__ = [
    "auth",
    "bisac",
    "bookmarks",
    "leaderboard",
    "ledger",
    "metadata",
    "user",
]
