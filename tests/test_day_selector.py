"""
Tests for day selector parsing and resolution
"""
from datetime import date

import pytest

from slot_finder.scheduler.day_selector import (
    DaySelector,
    NoMatchingBusinessDaysError,
    resolve_business_days,
    FIRST_N,
    FULL_RANGE,
    SPECIFIC_DAYS,
)

NEXT_WEEK = [date(2025, 7, d) for d in range(21, 26)]  # Mon..Fri


class TestResolveBusinessDays:
    """Narrowing an enumerated business-day range"""

    def test_full_range_keeps_everything(self):
        resolution = resolve_business_days(NEXT_WEEK, DaySelector(FULL_RANGE))
        assert resolution.days == NEXT_WEEK
        assert resolution.effective_start == date(2025, 7, 21)
        assert resolution.effective_end == date(2025, 7, 25)
        assert resolution.is_multi_day

    def test_missing_selector_is_full_range(self):
        assert resolve_business_days(NEXT_WEEK, None).days == NEXT_WEEK

    def test_first_n(self):
        resolution = resolve_business_days(NEXT_WEEK, DaySelector(FIRST_N, n=2))
        assert resolution.days == [date(2025, 7, 21), date(2025, 7, 22)]
        assert resolution.effective_end == date(2025, 7, 22)

    def test_first_n_larger_than_range(self):
        assert resolve_business_days(NEXT_WEEK, DaySelector(FIRST_N, n=9)).days == NEXT_WEEK

    def test_first_one_is_single_day(self):
        resolution = resolve_business_days(NEXT_WEEK, DaySelector(FIRST_N, n=1))
        assert resolution.days == [date(2025, 7, 21)]
        assert not resolution.is_multi_day

    @pytest.mark.parametrize("n", [None, 0, -3])
    def test_first_n_without_valid_n_falls_back_to_full_range(self, n):
        assert resolve_business_days(NEXT_WEEK, DaySelector(FIRST_N, n=n)).days == NEXT_WEEK

    def test_specific_days_keeps_order(self):
        resolution = resolve_business_days(NEXT_WEEK, DaySelector(SPECIFIC_DAYS, days_of_week=["Thu", "Tue"]))
        assert resolution.days == [date(2025, 7, 22), date(2025, 7, 24)]

    def test_specific_days_accepts_full_names_any_case(self):
        selector = DaySelector(SPECIFIC_DAYS, days_of_week=["tuesday", "FRIDAY"])
        assert resolve_business_days(NEXT_WEEK, selector).days == [date(2025, 7, 22), date(2025, 7, 25)]

    def test_specific_days_with_no_match_raises(self):
        selector = DaySelector(SPECIFIC_DAYS, days_of_week=["Sat"])
        with pytest.raises(NoMatchingBusinessDaysError) as exc_info:
            resolve_business_days(NEXT_WEEK, selector)
        assert exc_info.value.days_of_week == ["Sat"]

    def test_specific_days_outside_short_range_raises(self):
        with pytest.raises(NoMatchingBusinessDaysError):
            resolve_business_days([date(2025, 7, 21)], DaySelector(SPECIFIC_DAYS, days_of_week=["Wed"]))

    def test_specific_days_without_days_falls_back_to_full_range(self):
        assert resolve_business_days(NEXT_WEEK, DaySelector(SPECIFIC_DAYS, days_of_week=[])).days == NEXT_WEEK


class TestDaySelectorFromDict:
    """Tolerant parsing of the model's daysSelector object"""

    def test_valid_first_n(self):
        selector = DaySelector.from_dict({"mode": "firstN", "n": 3, "daysOfWeek": []})
        assert selector.mode == FIRST_N
        assert selector.n == 3

    def test_numeric_string_n(self):
        assert DaySelector.from_dict({"mode": "firstN", "n": "2"}).n == 2

    def test_boolean_n_is_ignored(self):
        assert DaySelector.from_dict({"mode": "firstN", "n": True}).n is None

    def test_unknown_mode(self):
        assert DaySelector.from_dict({"mode": "everyOtherDay"}).mode == FULL_RANGE

    @pytest.mark.parametrize("data", [None, "fullRange", 42, []])
    def test_non_object_defaults(self, data):
        selector = DaySelector.from_dict(data)
        assert selector.mode == FULL_RANGE
        assert selector.days_of_week == []

    def test_single_day_string(self):
        assert DaySelector.from_dict({"mode": "specificDays", "daysOfWeek": "Wed"}).days_of_week == ["Wed"]

    def test_round_trip_dict(self):
        data = {"mode": "specificDays", "n": None, "daysOfWeek": ["Mon", "Fri"]}
        assert DaySelector.from_dict(data).to_dict() == data
