"""Time utilities for database models and API payloads."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def epoch_seconds(moment: datetime | None = None) -> int:
    """Return ``moment`` (default: now) as whole UNIX epoch seconds."""
    return int((moment or utcnow()).timestamp())


def format_timestamp(value: datetime | None) -> str | None:
    """Render a stored timestamp as ``d MMMM yyyy, h:mm a``.

    The stored value is never modified; this is applied when a row is
    serialized for display. Naive datetimes are assumed to be UTC, which is
    how SQLite hands timezone-aware columns back.

    >>> format_timestamp(datetime(2024, 3, 5, 15, 7, tzinfo=UTC))
    '5 March 2024, 3:07 PM'
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value.day} {value:%B %Y}, {hour}:{value:%M} {meridiem}"
