"""Time utility helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

ONE_WEEK = timedelta(days=7)


def now_utc() -> datetime:
    """Return current timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse a PostgREST timestamp (``Z`` or offset suffixed) into aware UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def week_of_year(base: datetime | None = None) -> tuple[int, int]:
    """Return ``(week, year)`` counting whole weeks since January 1st.

    Week 1 starts on January 1st regardless of weekday, so this is not the
    ISO week number.
    """
    target = base or now_utc()
    if target.tzinfo is None:
        target = target.replace(tzinfo=UTC)
    start = datetime(target.year, 1, 1, tzinfo=target.tzinfo)
    week = int((target - start) // ONE_WEEK) + 1
    return week, target.year
