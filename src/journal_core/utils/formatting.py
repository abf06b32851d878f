"""Display formatting helpers for feed counters and timestamps."""

from datetime import datetime

from journal_core.utils.time import utc_now


def format_count(count: int | None) -> str:
    """Format a like/comment counter.

    Example:
        format_count(1530) → "1.5K"
    """
    if count is None:
        return "0"

    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


def format_time_ago(created_at: datetime, *, now: datetime | None = None) -> str:
    """Format the time elapsed since *created_at*.

    Anything older than 30 days is shown as a medium date, e.g. "Jan 15, 2024".
    """
    elapsed = ((now or utc_now()) - created_at).total_seconds()

    if elapsed < 60:
        return "Just now"
    if elapsed < 3600:
        return f"{int(elapsed // 60)}m ago"
    if elapsed < 86400:
        return f"{int(elapsed // 3600)}h ago"
    if elapsed < 2_592_000:
        return f"{int(elapsed // 86400)}d ago"
    return f"{created_at:%b} {created_at.day}, {created_at.year}"
