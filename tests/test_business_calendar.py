"""
Tests for business-day arithmetic
"""
from datetime import date, datetime

from slot_finder.calendar.business_calendar import (
    enumerate_business_days,
    format_date_with_day,
    format_time_range,
    is_weekend,
    next_business_day_on_or_after,
    relative_date_description,
)


class TestEnumerateBusinessDays:
    """Inclusive Monday-Friday enumeration"""

    def test_full_week(self):
        days = list(enumerate_business_days(date(2025, 7, 21), date(2025, 7, 25)))
        assert days == [date(2025, 7, d) for d in range(21, 26)]

    def test_skips_weekend(self):
        days = list(enumerate_business_days(date(2025, 7, 18), date(2025, 7, 21)))
        assert days == [date(2025, 7, 18), date(2025, 7, 21)]

    def test_weekend_only_range_is_empty(self):
        assert list(enumerate_business_days(date(2025, 7, 19), date(2025, 7, 20))) == []

    def test_inverted_range_is_empty(self):
        assert list(enumerate_business_days(date(2025, 7, 25), date(2025, 7, 21))) == []

    def test_times_are_ignored(self):
        days = list(enumerate_business_days(datetime(2025, 7, 21, 16, 45), datetime(2025, 7, 22, 8, 0)))
        assert days == [date(2025, 7, 21), date(2025, 7, 22)]

    def test_single_day(self):
        assert list(enumerate_business_days(date(2025, 7, 23), date(2025, 7, 23))) == [date(2025, 7, 23)]


def test_is_weekend():
    assert is_weekend(date(2025, 7, 19))
    assert is_weekend(datetime(2025, 7, 20, 12, 0))
    assert not is_weekend(date(2025, 7, 21))


def test_next_business_day_on_or_after():
    assert next_business_day_on_or_after(date(2025, 7, 19)) == date(2025, 7, 21)
    assert next_business_day_on_or_after(date(2025, 7, 20)) == date(2025, 7, 21)
    assert next_business_day_on_or_after(datetime(2025, 7, 22, 9, 0)) == date(2025, 7, 22)


class TestFormatting:
    """Human-readable date labels"""

    def test_relative_today_and_tomorrow(self):
        now = datetime(2025, 7, 16, 10, 0)
        assert relative_date_description(date(2025, 7, 16), now) == "today"
        assert relative_date_description(date(2025, 7, 17), now) == "tomorrow"

    def test_relative_within_a_week(self):
        now = datetime(2025, 7, 16, 10, 0)
        label = relative_date_description(date(2025, 7, 21), now)
        assert label == "in 5 days on Monday [21.07.2025]"

    def test_relative_far_future(self):
        now = datetime(2025, 7, 16, 10, 0)
        assert relative_date_description(date(2025, 8, 4), now) == format_date_with_day(date(2025, 8, 4))

    def test_time_range(self):
        assert format_time_range(datetime(2025, 7, 21, 9, 0), datetime(2025, 7, 21, 10, 30)) == "09:00 - 10:30"
