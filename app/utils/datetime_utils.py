"""
Common date/time helpers.

Storage: all timestamps are stored in UTC.
SQLite hands back naive datetimes, so anything compared or serialized
goes through as_utc() first.
"""

from datetime import datetime, timedelta, timezone


def as_utc(dt: datetime) -> datetime:
    """
    Convert dt to tz-aware UTC.
    If dt is naive, we treat it as UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    """
    Get current UTC datetime.
    """
    return datetime.now(timezone.utc)


def utc_day_bounds(now: datetime | None = None) -> tuple[datetime, datetime]:
    """
    Return [start, end) of the UTC calendar day containing `now`.
    """
    now = as_utc(now or utc_now())
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)

