"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite returns naive CURRENT_TIMESTAMP values)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
