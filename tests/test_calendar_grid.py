"""Tests for calendar grids and navigation."""

from datetime import date, timedelta

import pytest

from careslot.scheduling.calendar_grid import (
    MONTH_GRID_CELLS,
    CalendarNavigator,
    ViewMode,
    build_grid,
    period_label,
    shift,
)
from tests.conftest import MONDAY, SATURDAY


class TestMonthGrid:
    @pytest.mark.parametrize("reference", [
        date(2025, 1, 15),
        date(2025, 2, 1),
        date(2024, 2, 29),
        date(2026, 2, 10),
        date(2025, 6, 30),
        date(2025, 9, 1),
        date(2025, 12, 31),
        date(2026, 1, 1),
    ])
    def test_always_35_cells_starting_monday(self, reference, weekday_schedule):
        cells = build_grid(reference, ViewMode.MONTH, weekday_schedule, today=MONDAY)
        assert len(cells) == MONTH_GRID_CELLS == 35
        assert cells[0].date.weekday() == 0
        assert cells[0].date <= reference.replace(day=1)

    def test_cells_are_consecutive_days(self, weekday_schedule):
        cells = build_grid(date(2025, 4, 10), ViewMode.MONTH, weekday_schedule, today=MONDAY)
        for earlier, later in zip(cells, cells[1:]):
            assert later.date - earlier.date == timedelta(days=1)

    def test_leading_cells_from_previous_month(self, weekday_schedule):
        # April 2025 starts on a Tuesday.
        cells = build_grid(date(2025, 4, 10), ViewMode.MONTH, weekday_schedule, today=MONDAY)
        assert cells[0].date == date(2025, 3, 31)
        assert not cells[0].in_focused_period
        assert cells[1].date == date(2025, 4, 1)
        assert cells[1].in_focused_period

    def test_month_starting_on_monday(self, weekday_schedule):
        cells = build_grid(date(2025, 9, 15), ViewMode.MONTH, weekday_schedule, today=MONDAY)
        assert cells[0].date == date(2025, 9, 1)

    def test_selectability(self, weekday_schedule):
        cells = {c.date: c for c in build_grid(MONDAY, ViewMode.MONTH, weekday_schedule, today=MONDAY)}
        assert cells[MONDAY].is_today and cells[MONDAY].is_selectable
        assert cells[date(2025, 4, 4)].is_past and not cells[date(2025, 4, 4)].is_selectable
        assert not cells[SATURDAY].is_selectable
        assert cells[date(2025, 4, 8)].is_selectable

    def test_selected_flag(self, weekday_schedule):
        cells = build_grid(MONDAY, ViewMode.MONTH, weekday_schedule, today=MONDAY, selected_date=date(2025, 4, 9))
        assert [c.date for c in cells if c.is_selected] == [date(2025, 4, 9)]


class TestWeekAndDayGrid:
    def test_week_grid_is_monday_to_sunday(self, weekday_schedule):
        cells = build_grid(date(2025, 4, 10), ViewMode.WEEK, weekday_schedule, today=MONDAY)
        assert [c.date for c in cells] == [MONDAY + timedelta(days=i) for i in range(7)]
        assert all(c.in_focused_period for c in cells)

    def test_day_grid_single_cell(self, weekday_schedule):
        cells = build_grid(date(2025, 4, 10), ViewMode.DAY, weekday_schedule, today=MONDAY)
        assert len(cells) == 1
        assert cells[0].date == date(2025, 4, 10)


class TestShift:
    def test_month_rolls_year(self):
        assert shift(date(2025, 12, 15), ViewMode.MONTH, 1) == date(2026, 1, 15)

    def test_month_back_rolls_year(self):
        assert shift(date(2026, 1, 15), ViewMode.MONTH, -1) == date(2025, 12, 15)

    def test_month_clamps_day(self):
        assert shift(date(2025, 1, 31), ViewMode.MONTH, 1) == date(2025, 2, 28)

    def test_week(self):
        assert shift(MONDAY, ViewMode.WEEK, -1) == date(2025, 3, 31)

    def test_day(self):
        assert shift(date(2025, 12, 31), ViewMode.DAY, 1) == date(2026, 1, 1)


class TestPeriodLabel:
    def test_month(self):
        assert period_label(date(2025, 4, 10), ViewMode.MONTH) == "April 2025"

    def test_week(self):
        assert period_label(date(2025, 4, 10), ViewMode.WEEK) == "Apr 7 - Apr 13, 2025"

    def test_day(self):
        assert period_label(date(2025, 4, 10), ViewMode.DAY) == "Thursday, April 10, 2025"


class TestCalendarNavigator:
    def test_starts_on_today(self, weekday_schedule):
        nav = CalendarNavigator(weekday_schedule, today=MONDAY)
        assert nav.reference_date == MONDAY
        assert nav.label == "April 2025"

    def test_next_prev_today(self, weekday_schedule):
        nav = CalendarNavigator(weekday_schedule, today=MONDAY)
        assert nav.next() == date(2025, 5, 7)
        assert nav.prev() == MONDAY
        nav.next()
        nav.next()
        assert nav.today() == MONDAY

    def test_navigation_keeps_selection(self, weekday_schedule):
        nav = CalendarNavigator(weekday_schedule, today=MONDAY)
        assert nav.select(date(2025, 4, 9))
        nav.next()
        assert nav.selected_date == date(2025, 4, 9)

    def test_select_refuses_closed_and_past_days(self, weekday_schedule):
        nav = CalendarNavigator(weekday_schedule, today=MONDAY)
        assert not nav.select(SATURDAY)
        assert not nav.select(date(2025, 4, 4))
        assert nav.selected_date is None

    def test_select_today(self, weekday_schedule):
        nav = CalendarNavigator(weekday_schedule, today=MONDAY)
        assert nav.select(MONDAY)

    def test_set_view_and_focus(self, weekday_schedule):
        nav = CalendarNavigator(weekday_schedule, today=MONDAY)
        nav.set_view(ViewMode.WEEK)
        nav.focus(date(2025, 12, 31))
        assert [c.date for c in nav.cells][0] == date(2025, 12, 29)
        nav.next()
        assert nav.reference_date == date(2026, 1, 7)

    def test_month_steps_keep_the_original_day(self, weekday_schedule):
        nav = CalendarNavigator(weekday_schedule, reference_date=date(2025, 1, 31), today=MONDAY)
        assert nav.next() == date(2025, 2, 28)
        assert nav.next() == date(2025, 3, 31)
        assert nav.prev() == date(2025, 2, 28)
        nav.set_view(ViewMode.DAY)
        nav.next()
        nav.set_view(ViewMode.MONTH)
        assert nav.next() == date(2025, 4, 1)

    def test_focus_resets_month_anchor(self, weekday_schedule):
        nav = CalendarNavigator(weekday_schedule, reference_date=date(2025, 1, 31), today=MONDAY)
        nav.focus(date(2025, 2, 15))
        assert nav.next() == date(2025, 3, 15)
