"""UTC helpers for token expiries, lockout windows and the response envelope.

SQLite hands back naive datetimes; anything read from the store goes
through ensure_utc before it is compared with utc_now().
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Treat naive values as UTC; convert aware ones. None passes through."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def isoformat_utc(dt: datetime | None = None) -> str:
    """ISO 8601 in UTC with millisecond precision and a 'Z' suffix (default: now)."""
    value = ensure_utc(dt) or utc_now()
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def from_timestamp_utc(timestamp: float) -> datetime:
    """Aware datetime for a JWT numeric date (seconds since epoch)."""
    return datetime.fromtimestamp(timestamp, tz=UTC)
