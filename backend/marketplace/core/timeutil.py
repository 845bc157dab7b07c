# marketplace/core/timeutil.py
import datetime as dt


def utc_now() -> dt.datetime:
    """Current UTC datetime with timezone information."""
    return dt.datetime.now(dt.timezone.utc)


def as_utc(value: dt.datetime | None) -> dt.datetime | None:
    """Treat naive datetimes as UTC so they compare with stored values."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def iso(value: dt.datetime | None) -> str | None:
    """ISO-8601 string for API responses (always UTC, None passes through)."""
    value = as_utc(value)
    return value.isoformat() if value else None
