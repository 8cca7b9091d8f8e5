"""Clock helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def calculate_time_delta(minutes: float, interval: int) -> timedelta:
    """Spacing between samples when *interval* samples cover *minutes*.

    calculate_time_delta(2, 10) == timedelta(seconds=12)
    """
    return timedelta(minutes=minutes / interval)


def as_utc(ts: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops tzinfo)."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts
