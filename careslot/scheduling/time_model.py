"""
Weekly availability data model.

A provider's schedule is a recurring weekly template: at most one
WorkingHoursEntry per weekday, each holding local wall-clock start/end
times. Nothing here carries timezone information.

Usage:
    schedule = WorkingHoursSchedule.from_payload([
        {"day": "Monday", "startTime": "9:00 am", "endTime": "5:00 pm", "isAvailable": True},
    ])
    schedule.has_available_weekday(date(2025, 4, 7))  # True, a Monday
"""

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional, Union

from careslot.errors import ScheduleConfigError
from careslot.schemas.provider_schema import ProviderRecord, WorkingHoursPayload

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(
    r"^\s*(?P<hour>\d{1,2}):(?P<minute>\d{2})\s*(?:(?P<meridiem>[ap])\.?\s*m?\.?)?\s*$",
    re.IGNORECASE,
)


class WeekDay(str, Enum):
    """Calendar weekdays, identified by lowercase name."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def parse(cls, name: str) -> "WeekDay":
        """Resolve a weekday by name, ignoring case and surrounding space."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown weekday: {name!r}") from None

    @classmethod
    def from_date(cls, value: date) -> "WeekDay":
        return _WEEKDAYS_BY_INDEX[value.weekday()]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


# date.weekday(): Monday == 0
_WEEKDAYS_BY_INDEX: tuple[WeekDay, ...] = tuple(WeekDay)


def format_time(minutes: int) -> str:
    """Render minutes since midnight as ``h:mm am/pm``.

    Examples:
        >>> format_time(540)
        '9:00 am'
        >>> format_time(0)
        '12:00 am'
        >>> format_time(765)
        '12:45 pm'
    """
    hour24, minute = divmod(minutes, 60)
    meridiem = "pm" if hour24 >= 12 else "am"
    hour = hour24 % 12 or 12
    return f"{hour}:{minute:02d} {meridiem}"


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Minutes since local midnight, 0..1439."""

    minutes: int

    def __post_init__(self) -> None:
        if not 0 <= self.minutes < MINUTES_PER_DAY:
            raise ValueError(f"TimeOfDay out of range: {self.minutes}")

    @classmethod
    def parse(cls, text: str) -> "TimeOfDay":
        """Parse ``h:mm`` (24-hour) or ``h:mm am/pm`` (12-hour).

        12:00 am parses to 0 and 12:00 pm to 720.
        """
        match = _TIME_PATTERN.match(text or "")
        if not match:
            raise ValueError(f"Unrecognized time of day: {text!r}")
        hour = int(match.group("hour"))
        minute = int(match.group("minute"))
        meridiem = (match.group("meridiem") or "").lower()
        if minute > 59:
            raise ValueError(f"Unrecognized time of day: {text!r}")
        if meridiem:
            if hour > 12:
                raise ValueError(f"Hour out of range for 12-hour clock: {text!r}")
            hour = hour % 12 + (12 if meridiem == "p" else 0)
        elif hour > 23:
            raise ValueError(f"Hour out of range: {text!r}")
        return cls(hour * 60 + minute)

    @property
    def label(self) -> str:
        return format_time(self.minutes)

    def plus(self, minutes: int) -> "TimeOfDay":
        """Shift forward, clamped to the last minute of the day."""
        return TimeOfDay(min(self.minutes + minutes, MINUTES_PER_DAY - 1))

    def __add__(self, minutes: int) -> "TimeOfDay":
        if not isinstance(minutes, int):
            return NotImplemented
        return self.plus(minutes)

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class WorkingHoursEntry:
    """Availability for one weekday of the recurring schedule."""

    day: WeekDay
    is_available: bool
    start: Optional[TimeOfDay] = None
    end: Optional[TimeOfDay] = None

    def validate(self) -> None:
        """Raise ScheduleConfigError if an enabled entry cannot hold slots."""
        if not self.is_available:
            return
        if self.start is None or self.end is None:
            raise ScheduleConfigError(f"{self.day.display_name}: missing start or end time")
        if self.start >= self.end:
            raise ScheduleConfigError(
                f"{self.day.display_name}: start {self.start.label} is not before "
                f"end {self.end.label}"
            )

    @classmethod
    def from_payload(cls, payload: Union[WorkingHoursPayload, dict[str, Any]]) -> "WorkingHoursEntry":
        """Build an entry from a directory row.

        Unparseable times yield a disabled entry instead of an error.
        """
        if isinstance(payload, dict):
            payload = WorkingHoursPayload.model_validate(payload)
        day = WeekDay.parse(payload.day)
        try:
            start = TimeOfDay.parse(payload.start_time) if payload.start_time else None
            end = TimeOfDay.parse(payload.end_time) if payload.end_time else None
        except ValueError as exc:
            logger.warning("Disabling %s working hours: %s", day.value, exc)
            return cls(day=day, is_available=False)
        return cls(day=day, is_available=payload.is_available, start=start, end=end)


class WorkingHoursSchedule(Mapping[WeekDay, WorkingHoursEntry]):
    """Read-only weekly template: at most one entry per weekday."""

    def __init__(self, entries: Iterable[WorkingHoursEntry] = ()) -> None:
        self._entries: dict[WeekDay, WorkingHoursEntry] = {}
        for entry in entries:
            if entry.day in self._entries:
                logger.debug("Duplicate working hours for %s, keeping the later row", entry.day.value)
            self._entries[entry.day] = entry

    @classmethod
    def from_payload(
        cls, rows: Iterable[Union[WorkingHoursPayload, dict[str, Any]]]
    ) -> "WorkingHoursSchedule":
        entries = []
        for row in rows:
            try:
                entries.append(WorkingHoursEntry.from_payload(row))
            except ValueError as exc:
                logger.warning("Skipping working hours row: %s", exc)
        return cls(entries)

    @classmethod
    def from_provider(cls, provider: ProviderRecord) -> "WorkingHoursSchedule":
        return cls.from_payload(provider.working_hours)

    def __getitem__(self, day: WeekDay) -> WorkingHoursEntry:
        return self._entries[day]

    def __iter__(self) -> Iterator[WeekDay]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def entry_for(self, day: WeekDay) -> Optional[WorkingHoursEntry]:
        return self._entries.get(day)

    def entry_for_date(self, value: date) -> Optional[WorkingHoursEntry]:
        return self._entries.get(WeekDay.from_date(value))

    def has_available_weekday(self, value: date) -> bool:
        """True when the date's weekday has an enabled entry."""
        entry = self.entry_for_date(value)
        return entry is not None and entry.is_available

    def __repr__(self) -> str:
        enabled = [d.value for d, e in self._entries.items() if e.is_available]
        return f"WorkingHoursSchedule(enabled={enabled})"


@dataclass(frozen=True, order=True)
class Slot:
    """A bookable start time of fixed duration."""

    start: TimeOfDay
    duration_minutes: int

    @property
    def label(self) -> str:
        return self.start.label

    @property
    def end(self) -> TimeOfDay:
        return self.start.plus(self.duration_minutes)

    @property
    def end_label(self) -> str:
        return self.end.label
