"""Streak calculation."""

from datetime import date, datetime, timedelta, timezone

from devtracker.goals.streaks import Streak, calculate_streak, calendar_streak, to_day

TODAY = date(2026, 10, 19)


def days_back(*offsets):
    return [TODAY - timedelta(days=offset) for offset in offsets]


def test_no_active_days():
    assert calculate_streak([], TODAY) == Streak(0, 0)


def test_single_day_today():
    assert calculate_streak([TODAY], TODAY) == Streak(1, 1)


def test_single_day_yesterday():
    assert calculate_streak(days_back(1), TODAY) == Streak(1, 1)


def test_current_is_zero_when_last_activity_is_older_than_yesterday():
    streak = calculate_streak(days_back(2, 3, 4), TODAY)
    assert streak.current == 0
    assert streak.max == 3


def test_run_ending_yesterday_counts_fully():
    streak = calculate_streak(days_back(1, 2, 3, 4), TODAY)
    assert streak == Streak(4, 4)


def test_current_stops_at_first_gap():
    streak = calculate_streak(days_back(0, 1, 3, 4, 5), TODAY)
    assert streak == Streak(2, 3)


def test_max_is_longest_run_regardless_of_order():
    run_of_three = days_back(20, 21, 22)
    run_of_five = days_back(10, 11, 12, 13, 14)

    assert calculate_streak(run_of_three + run_of_five, TODAY).max == 5
    assert calculate_streak(run_of_five + run_of_three, TODAY).max == 5
    assert calculate_streak(list(reversed(run_of_five + run_of_three)), TODAY).max == 5


def test_time_of_day_and_duplicates_are_ignored():
    active = [
        datetime(2026, 10, 19, 23, 59),
        datetime(2026, 10, 19, 0, 1),
        "2026-10-18",
        "2026-10-17T08:30:00Z",
    ]
    assert calculate_streak(active, TODAY) == Streak(3, 3)


def test_to_day_accepts_strings_and_datetimes():
    assert to_day("2026-10-18") == date(2026, 10, 18)
    assert to_day(datetime(2026, 10, 18, 12, 0)) == date(2026, 10, 18)
    assert to_day(date(2026, 10, 18)) == date(2026, 10, 18)


def utc_midnight(day):
    return str(int(datetime(day.year, day.month, day.day, tzinfo=timezone.utc).timestamp()))


def test_calendar_streak_from_today():
    calendar = {utc_midnight(day): 2 for day in days_back(0, 1, 2)}
    assert calendar_streak(calendar, TODAY) == 3


def test_calendar_streak_alive_from_yesterday():
    calendar = {utc_midnight(day): 1 for day in days_back(1, 2, 5)}
    assert calendar_streak(calendar, TODAY) == 2


def test_calendar_streak_broken():
    calendar = {utc_midnight(day): 4 for day in days_back(2, 3)}
    assert calendar_streak(calendar, TODAY) == 0


def test_calendar_zero_counts_do_not_count():
    calendar = {utc_midnight(day): 1 for day in days_back(1, 3)}
    calendar[utc_midnight(TODAY - timedelta(days=2))] = 0
    assert calendar_streak(calendar, TODAY) == 1


def test_calendar_empty():
    assert calendar_streak({}, TODAY) == 0
