"""
Time helpers.

SQLite hands timestamps back without tzinfo even though every value is
written in UTC, so comparisons go through ``ensure_utc``.
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Attach UTC to naive datetimes loaded from the database.

    Args:
        dt: Datetime, possibly naive

    Returns:
        Timezone-aware datetime, or None when dt is None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def is_expired(expires_at: datetime | None) -> bool:
    """True when expires_at is missing or already in the past."""
    expires = ensure_utc(expires_at)
    return expires is None or expires <= utc_now()


def start_of_day(dt: datetime) -> datetime:
    """Midnight UTC of the given day."""
    return dt.astimezone(timezone.utc).replace(
        hour=0, minute=0, second=0, microsecond=0
    )


def days_ago(days: int) -> datetime:
    return utc_now() - timedelta(days=days)
