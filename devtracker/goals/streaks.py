"""Consecutive-day streak calculation."""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, NamedTuple, Optional, Union

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)

DayLike = Union[date, datetime, str]


class Streak(NamedTuple):
    """Current and longest run of consecutive active days."""

    current: int = 0
    max: int = 0


def to_day(value: DayLike) -> date:
    """
    Normalize a date, datetime or ISO string to a calendar day.

    Time of day is dropped so two entries on the same day never differ.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()


def calculate_streak(
    active_days: Iterable[DayLike], today: Optional[date] = None
) -> Streak:
    """
    Calculate current and max streaks from days with a positive score.

    Args:
        active_days: Days with activity, in any order (duplicates allowed)
        today: Reference day, defaults to the local date

    Returns:
        Streak(current, max). ``current`` is 0 unless the most recent
        active day is today or yesterday.

    Example:
        today = Jun 10, active = Jun 9, Jun 8, Jun 7, Jun 3
        = Streak(current=3, max=3)
    """
    days = sorted({to_day(day) for day in active_days}, reverse=True)
    if not days:
        return Streak(0, 0)

    today = today or date.today()

    current = 0
    if days[0] in (today, today - ONE_DAY):
        current = 1
        for previous, day in zip(days, days[1:]):
            if previous - day != ONE_DAY:
                break
            current += 1

    longest = 0
    run = 0
    previous = None
    for day in days:
        if previous is not None and previous - day == ONE_DAY:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day

    return Streak(current, longest)


def calendar_streak(calendar: dict, today: Optional[date] = None) -> int:
    """
    Current streak from a submission calendar.

    Args:
        calendar: Mapping of epoch seconds (UTC midnight) to submission count
        today: Reference day, defaults to today in UTC

    Returns:
        Consecutive days with submissions ending today or yesterday
    """
    if not calendar:
        return 0

    days = []
    for timestamp, count in calendar.items():
        try:
            if int(count) <= 0:
                continue
            days.append(datetime.fromtimestamp(int(timestamp), tz=timezone.utc).date())
        except (ValueError, TypeError, OverflowError):
            logger.warning(f"Skipping calendar entry {timestamp!r}: {count!r}")

    today = today or datetime.now(timezone.utc).date()
    return calculate_streak(days, today).current
