"""Utilities for datetime handling."""

from datetime import UTC, datetime


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def from_timestamp(value: float) -> datetime:
    """Convert a POSIX timestamp (e.g. a file mtime) to an aware UTC datetime."""
    return datetime.fromtimestamp(value, UTC)


def format_local(dt: datetime | None) -> str:
    """Format a datetime for display, or 'never' when unset."""
    if dt is None:
        return "never"
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")
