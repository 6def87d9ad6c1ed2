"""
Bookable slot generation from a weekly working-hours schedule.

This is the single slot algorithm shared by every screen that offers
times: the home widget preview, the booking modal and the calendar views.

Policy (configurable): starting at the entry's opening time, step forward
in ``step_minutes`` increments and offer a slot whenever at least
``buffer_minutes`` remain before closing time.

Usage:
    slots = generate_slots(entry, duration_minutes=60, step_minutes=60)
    visible = exclude_past_for_today(slots, target_date, today, now_minutes)
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from careslot.config import settings
from careslot.errors import ScheduleConfigError
from careslot.scheduling.next_available import find_next_available
from careslot.scheduling.time_model import (
    Slot,
    TimeOfDay,
    WorkingHoursEntry,
    WorkingHoursSchedule,
    format_time,
)

logger = logging.getLogger(__name__)

__all__ = [
    "SlotBuckets",
    "build_slot_buckets",
    "exclude_past_for_today",
    "find_slot",
    "format_time",
    "generate_slots",
    "minutes_now",
    "same_time",
    "slots_for_date",
]

TimeLike = Union[str, TimeOfDay, Slot]


def generate_slots(
    entry: Optional[WorkingHoursEntry],
    duration_minutes: Optional[int] = None,
    step_minutes: Optional[int] = None,
    buffer_minutes: Optional[int] = None,
) -> list[Slot]:
    """Turn one weekday's working hours into ascending bookable slots.

    Disabled, missing or misconfigured entries produce no slots.
    """
    duration = settings.scheduling.appointment_duration_minutes if duration_minutes is None else duration_minutes
    step = settings.scheduling.slot_step_minutes if step_minutes is None else step_minutes
    buffer = settings.scheduling.slot_buffer_minutes if buffer_minutes is None else buffer_minutes
    if step < 1:
        raise ValueError(f"step_minutes must be >= 1, got {step}")
    if duration < 1:
        raise ValueError(f"duration_minutes must be >= 1, got {duration}")

    if entry is None or not entry.is_available:
        return []
    try:
        entry.validate()
    except ScheduleConfigError as exc:
        logger.warning("No slots generated: %s", exc)
        return []

    start = entry.start.minutes  # type: ignore[union-attr]
    end = entry.end.minutes  # type: ignore[union-attr]
    slots = []
    for m in range(start, end, step):
        if m + buffer > end:
            break
        slots.append(Slot(start=TimeOfDay(m), duration_minutes=duration))
    return slots


def minutes_now(now: Optional[datetime] = None) -> int:
    """Current local wall-clock minute of the day."""
    now = now or datetime.now()
    return now.hour * 60 + now.minute


def exclude_past_for_today(
    slots: Iterable[Slot],
    target_date: date,
    today: Optional[date] = None,
    now_minutes: Optional[int] = None,
) -> list[Slot]:
    """Drop slots starting at or before the current minute when ``target_date`` is today.

    Other dates pass through untouched. Always returns a new list.
    """
    today = today or date.today()
    if target_date != today:
        return list(slots)
    cutoff = minutes_now() if now_minutes is None else now_minutes
    return [s for s in slots if s.start.minutes > cutoff]


def _to_minutes(value: TimeLike) -> int:
    if isinstance(value, Slot):
        return value.start.minutes
    if isinstance(value, TimeOfDay):
        return value.minutes
    return TimeOfDay.parse(value).minutes


def same_time(a: TimeLike, b: TimeLike) -> bool:
    """Compare two times by minute value, so '09:00 am' equals '9:00 am'."""
    try:
        return _to_minutes(a) == _to_minutes(b)
    except ValueError:
        return False


def find_slot(slots: Iterable[Slot], label: Optional[str]) -> Optional[Slot]:
    """Find the slot matching a stored time label, if it is still offered."""
    if not label:
        return None
    for slot in slots:
        if same_time(slot, label):
            return slot
    return None


def slots_for_date(
    schedule: WorkingHoursSchedule,
    target_date: date,
    today: Optional[date] = None,
    now_minutes: Optional[int] = None,
    duration_minutes: Optional[int] = None,
) -> list[Slot]:
    """Slots offered on ``target_date``, with already-passed times removed."""
    slots = generate_slots(schedule.entry_for_date(target_date), duration_minutes)
    return exclude_past_for_today(slots, target_date, today, now_minutes)


@dataclass
class SlotBuckets:
    """Slots grouped the way the booking screen presents them."""

    today: date
    today_slots: list[Slot] = field(default_factory=list)
    tomorrow_slots: list[Slot] = field(default_factory=list)
    next_available_date: Optional[date] = None
    next_available_slots: list[Slot] = field(default_factory=list)

    @property
    def tomorrow(self) -> date:
        return self.today + timedelta(days=1)

    def is_empty(self) -> bool:
        return not (self.today_slots or self.tomorrow_slots or self.next_available_slots)


def build_slot_buckets(
    schedule: WorkingHoursSchedule,
    selected_date: Optional[date] = None,
    today: Optional[date] = None,
    now_minutes: Optional[int] = None,
) -> SlotBuckets:
    """Build the today / tomorrow / next-available groups.

    The next-available search starts after ``selected_date`` (today when
    nothing is selected yet).
    """
    today = today or date.today()
    buckets = SlotBuckets(
        today=today,
        today_slots=slots_for_date(schedule, today, today, now_minutes),
        tomorrow_slots=slots_for_date(schedule, today + timedelta(days=1), today, now_minutes),
    )
    next_date = find_next_available(selected_date or today, schedule)
    if next_date is not None:
        buckets.next_available_date = next_date
        buckets.next_available_slots = slots_for_date(schedule, next_date, today, now_minutes)
    logger.debug(
        "Slot buckets: today=%d tomorrow=%d next=%s",
        len(buckets.today_slots), len(buckets.tomorrow_slots), buckets.next_available_date,
    )
    return buckets
