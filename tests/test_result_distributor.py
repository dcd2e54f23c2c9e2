"""
Tests for the result distributor
"""
import random
from datetime import date, datetime, timedelta

from slot_finder.scheduler.result_distributor import distribute_results
from slot_finder.scheduler.slot_generator import CandidateSlot


def make_day(day, count=15, seed=0):
    rng = random.Random(seed + day.toordinal())
    slots = []
    start = datetime.combine(day, datetime.min.time()).replace(hour=9)
    for i in range(count):
        slot_start = start + timedelta(minutes=30 * i)
        slots.append(CandidateSlot(slot_start, slot_start + timedelta(hours=1), ["a@x.com"], 1,
                                   score=rng.uniform(0.3, 1.0)))
    return slots


def top(slots, n):
    return sorted(slots, key=lambda s: s.score, reverse=True)[:n]


DAYS = [date(2025, 7, 21), date(2025, 7, 22), date(2025, 7, 23)]


class TestMultiDay:
    """Every requested day gets a share before the global fill"""

    def test_even_share(self):
        per_day = {d: make_day(d) for d in DAYS}
        slots = [s for d in DAYS for s in per_day[d]]

        result = distribute_results(slots, 6, multi_day=True)

        assert len(result) == 6
        for day in DAYS:
            chosen = [s for s in result if s.day == day]
            assert len(chosen) == 2
            assert set(map(id, chosen)) == set(map(id, top(per_day[day], 2)))

    def test_remaining_capacity_goes_to_best_leftovers(self):
        per_day = {d: make_day(d) for d in DAYS}
        slots = [s for d in DAYS for s in per_day[d]]

        result = distribute_results(slots, 10, multi_day=True)

        assert len(result) == 10
        guaranteed = [s for d in DAYS for s in top(per_day[d], 3)]
        leftovers = [s for s in slots if s not in guaranteed]
        assert all(s in result for s in guaranteed)
        extra = [s for s in result if s not in guaranteed]
        assert extra == top(leftovers, 1)

    def test_sparse_day_is_filled_from_others(self):
        slots = make_day(DAYS[0], count=1) + make_day(DAYS[1]) + make_day(DAYS[2])
        result = distribute_results(slots, 6, multi_day=True)

        assert len(result) == 6
        assert len([s for s in result if s.day == DAYS[0]]) == 1

    def test_more_days_than_capacity(self):
        days = [date(2025, 7, 21) + timedelta(days=i) for i in range(5)]
        slots = [s for d in days for s in make_day(d, count=4)]

        result = distribute_results(slots, 3, multi_day=True)

        assert len(result) == 3
        assert len({s.day for s in result}) == 3

    def test_ranked_output(self):
        slots = [s for d in DAYS for s in make_day(d)]
        result = distribute_results(slots, 10, multi_day=True)
        assert [s.score for s in result] == sorted((s.score for s in result), reverse=True)

    def test_no_duplicates(self):
        slots = [s for d in DAYS for s in make_day(d, count=3)]
        result = distribute_results(slots, 20, multi_day=True)
        assert len(result) == len(set(map(id, result))) == 9


class TestSingleDay:
    """Single-day requests take the top scorers"""

    def test_top_scores(self):
        slots = make_day(DAYS[0])
        result = distribute_results(slots, 4, multi_day=False)
        assert [id(s) for s in result] == [id(s) for s in top(slots, 4)]

    def test_best_score_comes_first(self):
        start = datetime(2025, 7, 21, 9, 0)
        slots = [CandidateSlot(start + timedelta(hours=i), start + timedelta(hours=i + 1), ["a@x.com"], 1, score=score)
                 for i, score in enumerate([0.1, 0.9, 0.5])]

        result = distribute_results(slots, 3, multi_day=False)

        assert [s.score for s in result] == [0.9, 0.5, 0.1]
        assert [s.start_time.hour for s in result] == [10, 11, 9]

    def test_fewer_slots_than_capacity(self):
        slots = make_day(DAYS[0], count=3)
        assert len(distribute_results(slots, 10, multi_day=False)) == 3


def test_empty_and_zero_capacity():
    assert distribute_results([], 10, multi_day=True) == []
    assert distribute_results(make_day(DAYS[0]), 0, multi_day=False) == []
