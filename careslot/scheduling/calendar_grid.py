"""
Calendar navigation grids for month, week and day views.

Month view is always a rectangular 5x7 grid starting on the Monday on or
before the first of the month. Cells outside the month are still
rendered, flagged with ``in_focused_period=False``. Dates are local
calendar dates throughout.

Usage:
    nav = CalendarNavigator(schedule, today=date(2025, 4, 10))
    nav.next()                 # May 2025
    cells = nav.cells          # 35 CalendarCell values
    nav.select(date(2025, 5, 12))
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta

from careslot.scheduling.time_model import WorkingHoursSchedule
from careslot.utils import start_of_week

logger = logging.getLogger(__name__)

MONTH_GRID_CELLS = 35
WEEK_GRID_CELLS = 7


class ViewMode(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class CalendarCell:
    """One rendered day position with selectability metadata."""

    date: date
    in_focused_period: bool
    is_today: bool
    is_past: bool
    is_selectable: bool
    is_selected: bool = False


def _grid_dates(reference_date: date, view_mode: ViewMode) -> list[date]:
    if view_mode == ViewMode.MONTH:
        first = start_of_week(reference_date.replace(day=1))
        return [first + timedelta(days=i) for i in range(MONTH_GRID_CELLS)]
    if view_mode == ViewMode.WEEK:
        monday = start_of_week(reference_date)
        return [monday + timedelta(days=i) for i in range(WEEK_GRID_CELLS)]
    return [reference_date]


def _in_focus(cell_date: date, reference_date: date, view_mode: ViewMode) -> bool:
    if view_mode == ViewMode.MONTH:
        return (cell_date.year, cell_date.month) == (reference_date.year, reference_date.month)
    return True


def build_grid(
    reference_date: date,
    view_mode: ViewMode,
    schedule: WorkingHoursSchedule,
    today: Optional[date] = None,
    selected_date: Optional[date] = None,
) -> list[CalendarCell]:
    """Build the ordered day cells for the active view.

    A cell is selectable when it is today or later and its weekday has an
    enabled working-hours entry.
    """
    today = today or date.today()
    cells = []
    for cell_date in _grid_dates(reference_date, view_mode):
        is_today = cell_date == today
        is_past = cell_date < today
        cells.append(CalendarCell(
            date=cell_date,
            in_focused_period=_in_focus(cell_date, reference_date, view_mode),
            is_today=is_today,
            is_past=is_past,
            is_selectable=(not is_past or is_today) and schedule.has_available_weekday(cell_date),
            is_selected=selected_date is not None and cell_date == selected_date,
        ))
    return cells


def shift(reference_date: date, view_mode: ViewMode, steps: int) -> date:
    """Move the reference date by whole units of the active view.

    Month steps clamp the day (31 Jan + 1 month = 28/29 Feb) and roll
    over year boundaries.
    """
    if view_mode == ViewMode.MONTH:
        return reference_date + relativedelta(months=steps)
    if view_mode == ViewMode.WEEK:
        return reference_date + timedelta(weeks=steps)
    return reference_date + timedelta(days=steps)


def period_label(reference_date: date, view_mode: ViewMode) -> str:
    """Heading text for the active period, e.g. 'April 2025'."""
    if view_mode == ViewMode.MONTH:
        return reference_date.strftime("%B %Y")
    if view_mode == ViewMode.WEEK:
        monday = start_of_week(reference_date)
        sunday = monday + timedelta(days=6)
        return f"{monday.strftime('%b')} {monday.day} - {sunday.strftime('%b')} {sunday.day}, {sunday.year}"
    return f"{reference_date.strftime('%A, %B')} {reference_date.day}, {reference_date.year}"


class CalendarNavigator:
    """
    View state for a calendar widget: active view, focused period and
    selected day.

    Navigation never changes the selection; selecting a date that is not
    selectable is refused.
    """

    def __init__(
        self,
        schedule: WorkingHoursSchedule,
        view_mode: ViewMode = ViewMode.MONTH,
        reference_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> None:
        self.schedule = schedule
        self._today = today
        self.view_mode = view_mode
        self.reference_date = reference_date or self.today_date
        self.selected_date: Optional[date] = None

    @property
    def today_date(self) -> date:
        return self._today or date.today()

    @property
    def cells(self) -> list[CalendarCell]:
        return build_grid(
            self.reference_date, self.view_mode, self.schedule,
            today=self.today_date, selected_date=self.selected_date,
        )

    @property
    def label(self) -> str:
        return period_label(self.reference_date, self.view_mode)

    @property
    def reference_date(self) -> date:
        return self._reference_date

    @reference_date.setter
    def reference_date(self, value: date) -> None:
        self._reference_date = value
        self._anchor_day = value.day

    def _step(self, steps: int) -> date:
        if self.view_mode == ViewMode.MONTH:
            # relativedelta clamps an absolute day to the month's length,
            # so 31 Jan -> 28 Feb -> 31 Mar.
            self._reference_date += relativedelta(months=steps, day=self._anchor_day)
        else:
            self.reference_date = shift(self._reference_date, self.view_mode, steps)
        return self._reference_date

    def prev(self) -> date:
        return self._step(-1)

    def next(self) -> date:
        return self._step(1)

    def today(self) -> date:
        self.reference_date = self.today_date
        return self.reference_date

    def set_view(self, view_mode: ViewMode) -> None:
        self.view_mode = view_mode

    def focus(self, value: date) -> None:
        """Jump the focused period to the one containing ``value``."""
        self.reference_date = value

    def select(self, value: date) -> bool:
        """Select a day if it is bookable. Returns whether it was accepted."""
        is_past = value < self.today_date
        if is_past or not self.schedule.has_available_weekday(value):
            logger.debug("Refused selection of %s", value.isoformat())
            return False
        self.selected_date = value
        return True
