"""Play-session aggregation: totals and per-day buckets.

Session timestamps are local wall time in a single fixed UTC offset (+8 by
default). A session belongs to the calendar date it started on.
"""

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta, timezone

from ..models.records import SessionRecord
from ..models.reports import DailyDuration

DEFAULT_UTC_OFFSET_HOURS = 8
DEFAULT_WINDOW_DAYS = 14


def local_today(utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS, now: datetime | None = None) -> date:
    """Today's date in the fixed offset.

    Args:
        utc_offset_hours: Offset applied to UTC
        now: Reference instant (defaults to the current time); naive values
            are taken as UTC
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone(timedelta(hours=utc_offset_hours))).date()


def total_time(sessions: Iterable[SessionRecord]) -> int:
    """Sum of all session durations, in seconds."""
    return sum(session.duration for session in sessions)


def daily_durations(
    sessions: Iterable[SessionRecord],
    window_days: int = DEFAULT_WINDOW_DAYS,
    reference_date: date | None = None,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
) -> list[DailyDuration]:
    """Seconds played per day over a trailing window.

    Args:
        sessions: Sessions of one title, in any order
        window_days: Number of consecutive days to report
        reference_date: Last day of the window (defaults to local today)
        utc_offset_hours: Offset used to find today when no reference is given

    Returns:
        Exactly ``window_days`` entries, oldest first; empty days report 0
    """
    if window_days < 1:
        raise ValueError(f"window_days must be at least 1, got {window_days}")
    if reference_date is None:
        reference_date = local_today(utc_offset_hours)

    first_day = reference_date - timedelta(days=window_days - 1)
    buckets: dict[date, int] = {first_day + timedelta(days=i): 0 for i in range(window_days)}

    for session in sessions:
        day = session.start_date
        if day in buckets:
            buckets[day] += session.duration

    return [DailyDuration(date=day, seconds=seconds) for day, seconds in buckets.items()]


def average_daily_play_seconds(sessions: Sequence[SessionRecord]) -> float:
    """Average seconds per day that had at least one session.

    Divides by the number of distinct play dates, not by a window length.
    Returns 0 when there are no sessions.
    """
    if not sessions:
        return 0.0
    play_dates = {session.start_date for session in sessions}
    return total_time(sessions) / len(play_dates)
