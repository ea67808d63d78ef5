"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Grant expiry and revocation timestamps are compared against this value,
    so every caller must use the same clock helper.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    SQLite returns naive datetimes even for DateTime(timezone=True) columns;
    repositories call this when mapping rows to DTOs.

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    """Return True when expires_at is set and not strictly in the future.

    Args:
        expires_at: Optional expiry (naive values are treated as UTC).
        now: Reference time; defaults to utc_now().
    """
    if expires_at is None:
        return False
    reference = now or utc_now()
    return ensure_utc(expires_at) <= ensure_utc(reference)
