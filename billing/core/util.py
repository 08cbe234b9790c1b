"""Helper functions for the visit billing engine."""

from datetime import date, datetime, time, timedelta

from .types import InvalidVisitError

MINUTES_PER_HOUR = 60


def _duration_minutes(start: time, end: time, visit_id: str | None = None) -> int:
    """
    Whole minutes between two wall-clock times on the same day.

    Seconds are rounded half-up to the nearest minute.

    Raises:
        InvalidVisitError: If end is before start
    """
    delta = datetime.combine(date.min, end) - datetime.combine(date.min, start)
    if delta < timedelta(0):
        raise InvalidVisitError(
            f"End time {end:%H:%M:%S} is before start time {start:%H:%M:%S}", visit_id
        )
    seconds = delta // timedelta(seconds=1)
    return (seconds + 30) // 60


def _round_up_to_hour(minutes: int) -> tuple[int, bool]:
    """
    Apply the 60 minute rule to a billed duration.

    Durations over an hour are rounded up to the next whole hour; an hour or
    less is billed as is.

    Returns:
        Tuple of (billed minutes, whether the rule applied)

    Examples:
        >>> _round_up_to_hour(45)
        (45, False)
        >>> _round_up_to_hour(61)
        (120, True)
    """
    if minutes <= MINUTES_PER_HOUR:
        return minutes, False
    hours = -(-minutes // MINUTES_PER_HOUR)
    return hours * MINUTES_PER_HOUR, True
