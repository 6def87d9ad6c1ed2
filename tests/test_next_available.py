"""Tests for the bounded next-available search."""

from datetime import date

from careslot.scheduling.next_available import find_next_available, upcoming_available_dates
from careslot.scheduling.time_model import WorkingHoursSchedule
from tests.conftest import MONDAY, SATURDAY, TUESDAY, make_working_hours


class TestFindNextAvailable:
    def test_starts_the_day_after(self, weekday_schedule):
        assert find_next_available(MONDAY, weekday_schedule) == TUESDAY

    def test_skips_weekend(self, weekday_schedule):
        friday = date(2025, 4, 11)
        assert find_next_available(friday, weekday_schedule) == date(2025, 4, 14)

    def test_from_saturday(self, weekday_schedule):
        assert find_next_available(SATURDAY, weekday_schedule) == date(2025, 4, 14)

    def test_single_open_day_is_a_week_out(self):
        schedule = WorkingHoursSchedule.from_payload(make_working_hours(open_days=["Monday"]))
        assert find_next_available(MONDAY, schedule) == date(2025, 4, 14)

    def test_nothing_open_returns_none(self):
        schedule = WorkingHoursSchedule.from_payload(make_working_hours(open_days=[]))
        assert find_next_available(MONDAY, schedule) is None

    def test_respects_horizon(self):
        schedule = WorkingHoursSchedule.from_payload(make_working_hours(open_days=["Monday"]))
        assert find_next_available(MONDAY, schedule, horizon_days=6) is None
        assert find_next_available(MONDAY, schedule, horizon_days=7) == date(2025, 4, 14)

    def test_crosses_year_boundary(self, weekday_schedule):
        # 2025-12-31 is a Wednesday.
        assert find_next_available(date(2025, 12, 31), weekday_schedule) == date(2026, 1, 1)

    def test_unavailable_flag_wins_over_hours(self):
        rows = make_working_hours(open_days=[])
        rows[1] = {"day": "Tuesday", "startTime": "9:00 am", "endTime": "5:00 pm", "isAvailable": False}
        schedule = WorkingHoursSchedule.from_payload(rows)
        assert find_next_available(MONDAY, schedule) is None


class TestUpcomingAvailableDates:
    def test_limit(self, weekday_schedule):
        dates = upcoming_available_dates(MONDAY, weekday_schedule, limit=5)
        assert dates == [
            date(2025, 4, 8), date(2025, 4, 9), date(2025, 4, 10),
            date(2025, 4, 11), date(2025, 4, 14),
        ]

    def test_bounded_by_horizon(self):
        schedule = WorkingHoursSchedule.from_payload(make_working_hours(open_days=["Monday"]))
        dates = upcoming_available_dates(MONDAY, schedule, limit=10, horizon_days=21)
        assert dates == [date(2025, 4, 14), date(2025, 4, 21), date(2025, 4, 28)]


def test_zero_horizon_finds_nothing(weekday_schedule):
    assert find_next_available(MONDAY, weekday_schedule, horizon_days=0) is None
    assert upcoming_available_dates(MONDAY, weekday_schedule, horizon_days=0) == []
