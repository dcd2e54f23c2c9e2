"""
Tests for simulated availability
"""
from datetime import datetime, timedelta

from slot_finder.calendar.availability_simulator import AvailabilitySimulator, is_available


class TestAvailabilitySimulator:
    """Hash-based availability must be stable and roughly 80%"""

    def test_deterministic(self):
        slot = datetime(2025, 7, 21, 9, 30)
        assert is_available("alice@example.com", slot) == is_available("alice@example.com", slot)

    def test_email_case_insensitive(self):
        slot = datetime(2025, 7, 21, 11, 0)
        assert is_available("Alice@Example.com", slot) == is_available("alice@example.com", slot)

    def test_truncated_to_minute(self):
        slot = datetime(2025, 7, 21, 14, 30)
        assert is_available("bob@example.com", slot) == is_available("bob@example.com", slot.replace(second=42))

    def test_roughly_eighty_percent(self):
        start = datetime(2025, 1, 6, 9, 0)
        samples = [is_available("carol@example.com", start + timedelta(minutes=30 * i)) for i in range(2000)]
        ratio = sum(samples) / len(samples)
        assert 0.72 <= ratio <= 0.88

    def test_check_returns_subset_and_count(self):
        simulator = AvailabilitySimulator()
        emails = [f"user{i}@example.com" for i in range(10)]
        slot = datetime(2025, 7, 22, 10, 0)

        available, count = simulator.check(slot, emails)

        assert count == len(available)
        assert set(available) <= set(emails)
        assert available == [e for e in emails if simulator.is_available(e, slot)]

    def test_check_with_no_participants(self):
        assert AvailabilitySimulator().check(datetime(2025, 7, 22, 10, 0), []) == ([], 0)
