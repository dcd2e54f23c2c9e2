"""
Business-day arithmetic for the Slot Finder
"""
from datetime import date, datetime, timedelta
from typing import Iterator, Union

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def is_weekend(day: DateLike) -> bool:
    """Saturday or Sunday"""
    return _as_date(day).weekday() >= 5


def enumerate_business_days(start: DateLike, end: DateLike) -> Iterator[date]:
    """
    Yield every Monday-Friday date in [start, end] inclusive, ascending.

    Times are ignored. An inverted range yields nothing; callers validate
    ordering before getting here.
    """
    current = _as_date(start)
    last = _as_date(end)

    while current <= last:
        if not is_weekend(current):
            yield current
        current += timedelta(days=1)


def next_business_day_on_or_after(day: DateLike) -> date:
    """Snap forward past a weekend"""
    current = _as_date(day)
    while is_weekend(current):
        current += timedelta(days=1)
    return current


def format_date_with_day(day: DateLike) -> str:
    return f"{_as_date(day):%A} [{_as_date(day):%d.%m.%Y}]"


def format_time_range(start: datetime, end: datetime) -> str:
    return f"{start:%H:%M} - {end:%H:%M}"


def relative_date_description(target: DateLike, now: DateLike) -> str:
    """Human label for a day relative to now ("today", "tomorrow", "in 3 days on ...")"""
    target_day = _as_date(target)
    current_day = _as_date(now)

    if target_day == current_day:
        return "today"
    if target_day == current_day + timedelta(days=1):
        return "tomorrow"

    days_difference = (target_day - current_day).days
    if 1 < days_difference <= 7:
        return f"in {days_difference} days on {format_date_with_day(target_day)}"

    return format_date_with_day(target_day)
