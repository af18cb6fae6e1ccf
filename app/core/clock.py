"""Time helpers.

Timestamps are timezone-aware UTC everywhere in the application. SQLite
keeps no offset, so values read back may come out naive; ``ensure_utc``
reattaches UTC to those before display.
"""
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from app.core.config import settings


def utc_now() -> datetime:
    """Current time as aware UTC."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat a naive stored value as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def as_utc(value: datetime) -> datetime:
    """Normalize user input to aware UTC.

    Naive input is read as local time in the configured display timezone.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=ZoneInfo(settings.display_timezone))
    return value.astimezone(UTC)


def to_display(value: datetime) -> datetime:
    """Convert a stored UTC datetime to the display timezone."""
    return ensure_utc(value).astimezone(ZoneInfo(settings.display_timezone))
