from careslot.scheduling.booking_draft import (
    BookingDraft,
    BookingDraftStore,
    InMemoryDraftStorage,
    JsonFileDraftStorage,
)
from careslot.scheduling.calendar_grid import CalendarCell, CalendarNavigator, ViewMode, build_grid
from careslot.scheduling.next_available import find_next_available, upcoming_available_dates
from careslot.scheduling.slot_generator import SlotBuckets, build_slot_buckets, generate_slots
from careslot.scheduling.time_model import (
    Slot,
    TimeOfDay,
    WeekDay,
    WorkingHoursEntry,
    WorkingHoursSchedule,
)

__all__ = [
    "TimeOfDay", "WeekDay", "WorkingHoursEntry", "WorkingHoursSchedule", "Slot",
    "generate_slots", "build_slot_buckets", "SlotBuckets",
    "build_grid", "CalendarNavigator", "CalendarCell", "ViewMode",
    "find_next_available", "upcoming_available_dates",
    "BookingDraft", "BookingDraftStore", "InMemoryDraftStorage", "JsonFileDraftStorage",
]
