"""Date window calculation for the daily report."""

from datetime import datetime, time, timedelta

SATURDAY = 5
SUNDAY = 6


def compute_window_start(days_ago: int, now: datetime | None = None) -> datetime:
    """Return the start of the day ``days_ago`` days before ``now``.

    Days landing on a weekend are moved back to the preceding Friday, so a
    report asked for on Monday with ``days_ago=1`` covers Friday onwards.

    Args:
        days_ago: Number of calendar days to go back (must be >= 0)
        now: Reference time; defaults to the current local time

    Returns:
        Midnight of the resulting day, in the timezone of ``now`` or, when
        ``now`` is omitted, local midnight with that day's own UTC offset

    Raises:
        ValueError: If days_ago is negative
    """
    if days_ago < 0:
        raise ValueError("days_ago must not be negative")

    local_midnight = now is None
    if now is None:
        now = datetime.now().astimezone()

    day = now.date() - timedelta(days=days_ago)

    if day.weekday() == SATURDAY:
        day -= timedelta(days=1)
    elif day.weekday() == SUNDAY:
        day -= timedelta(days=2)

    if local_midnight:
        # The UTC offset of the window day can differ from today's (DST).
        return datetime.combine(day, time.min).astimezone()
    return datetime.combine(day, time.min, tzinfo=now.tzinfo)
