"""Shared test fixtures and helpers."""

from datetime import date
from typing import Callable, Optional

import httpx
import pytest

from careslot.clients.api_client import ApiClient
from careslot.schemas.provider_schema import ProviderRecord
from careslot.scheduling.booking_draft import BookingDraftStore, InMemoryDraftStorage
from careslot.scheduling.time_model import WorkingHoursSchedule

# 2025-04-07 is a Monday.
MONDAY = date(2025, 4, 7)
TUESDAY = date(2025, 4, 8)
SATURDAY = date(2025, 4, 12)

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
ALL_DAYS = WEEKDAYS + ["Saturday", "Sunday"]


class FakeClock:
    """Controllable replacement for time.time()."""

    def __init__(self, now: float = 1_744_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, hours: float) -> None:
        self.now += hours * 3600


def make_working_hours(
    open_days: Optional[list[str]] = None,
    start: str = "9:00 am",
    end: str = "5:00 pm",
) -> list[dict]:
    """Weekly rows for every day; ``open_days`` are enabled, the rest closed."""
    open_days = WEEKDAYS if open_days is None else open_days
    rows = []
    for day in ALL_DAYS:
        if day in open_days:
            rows.append({"day": day, "startTime": start, "endTime": end, "isAvailable": True})
        else:
            rows.append({"day": day, "startTime": "", "endTime": "", "isAvailable": False})
    return rows


def make_provider(
    provider_id: str = "p1",
    services: Optional[list] = None,
    working_hours: Optional[list[dict]] = None,
    name: str = "Harbourside Clinic",
) -> ProviderRecord:
    """Helper to create a ProviderRecord the way the directory returns it."""
    return ProviderRecord.model_validate({
        "_id": provider_id,
        "provider_name": name,
        "address": {"street": "12 Quay St", "city": "Sydney"},
        "services": services if services is not None else [
            {"id": "svc-1", "name": "Consultation"},
            {"id": "svc-2", "name": "Follow-up"},
        ],
        "working_hours": working_hours if working_hours is not None else make_working_hours(),
    })


def make_api(handler: Callable[[httpx.Request], httpx.Response], token: Optional[str] = "tok") -> ApiClient:
    """ApiClient wired to an in-process handler."""
    return ApiClient(
        base_url="http://test.local",
        timeout_seconds=5,
        token_provider=lambda: token,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def weekday_schedule():
    return WorkingHoursSchedule.from_payload(make_working_hours())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def draft_store(clock):
    return BookingDraftStore(InMemoryDraftStorage(), ttl_hours=24, clock=clock)
