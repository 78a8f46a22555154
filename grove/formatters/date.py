"""Date and time formatting utilities."""

from datetime import datetime, timezone
from typing import Any, Optional

from grove.constants import EPOCH


def format_date(date: Any) -> str:
    """
    Format a date object to YYYY-MM-DD string.

    Args:
        date: Date object (datetime or string)

    Returns:
        Formatted date string
    """
    if hasattr(date, "strftime"):
        return date.strftime("%Y-%m-%d")
    return str(date)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_created_time(created_at: datetime, now: Optional[datetime] = None) -> str:
    """
    Format a worktree creation time relative to now.

    Args:
        created_at: Creation time (EPOCH means unknown)
        now: Reference time, defaults to the current UTC time

    Returns:
        "unknown", "N minutes/hours/days/weeks ago", or YYYY-MM-DD for
        anything older than 30 days

    Example:
        "30 minutes ago", "1 hour ago", "3 days ago", "2 weeks ago", "2024-01-15"
    """
    if created_at == EPOCH:
        return "unknown"

    now = now or datetime.now(timezone.utc)
    seconds = int((now - created_at).total_seconds())
    hours = seconds // 3600

    if hours < 1:
        return _plural(max(seconds // 60, 0), "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if hours < 24 * 7:
        return _plural(hours // 24, "day")
    if hours < 24 * 30:
        return _plural(hours // (24 * 7), "week")
    return format_date(created_at)
