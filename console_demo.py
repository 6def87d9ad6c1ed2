"""
Offline console demo: walks through the booking engine without a backend.

Uses the real schedule model, slot generator, calendar grid, draft store,
booking submitter and optimistic coordinator. Remote collaborators are
served in-process through httpx.MockTransport, so nothing leaves the
machine. Designed for live demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario calendar
    python console_demo.py --scenario toggle
"""

import argparse
import asyncio
import json
from datetime import date, timedelta
from typing import Optional

import httpx

from careslot.clients.api_client import ApiClient
from careslot.clients.booking_api import BookingApiClient
from careslot.clients.interaction_api import InteractionApiClient
from careslot.config import settings
from careslot.interactions.coordinator import OptimisticInteractionCoordinator
from careslot.interactions.entity import EntityKind, OptimisticEntity
from careslot.schemas.booking_schema import BookingFormData
from careslot.schemas.provider_schema import ProviderRecord
from careslot.scheduling.booking_draft import BookingDraftStore
from careslot.scheduling.booking_submission import BookingSubmitter
from careslot.scheduling.calendar_grid import CalendarNavigator, ViewMode
from careslot.scheduling.slot_generator import build_slot_buckets
from careslot.scheduling.time_model import Slot, WorkingHoursSchedule

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_PROVIDER = {
    "_id": "prov-demo-1",
    "provider_name": "Harbourside Family Clinic",
    "address": {"street": "12 Quay St", "city": "Sydney", "country": "Australia"},
    "services": [
        {"id": "svc-gp", "name": "General Consultation", "category": "GP", "price": 80},
        {"id": "svc-vax", "name": "Vaccination", "category": "GP", "price": 40},
    ],
    "working_hours": [
        {"day": "Monday", "startTime": "9:00 am", "endTime": "5:00 pm", "isAvailable": True},
        {"day": "Tuesday", "startTime": "9:00 am", "endTime": "5:00 pm", "isAvailable": True},
        {"day": "Wednesday", "startTime": "1:00 pm", "endTime": "6:00 pm", "isAvailable": True},
        {"day": "Thursday", "startTime": "9:00 am", "endTime": "5:00 pm", "isAvailable": True},
        {"day": "Friday", "startTime": "9:00 am", "endTime": "12:00 pm", "isAvailable": True},
        {"day": "Saturday", "startTime": "", "endTime": "", "isAvailable": False},
    ],
}


def _demo_backend(request: httpx.Request) -> httpx.Response:
    """In-process stand-in for the booking and interaction endpoints."""
    path = request.url.path
    if path == "/api/v1/appointments/book":
        body = json.loads(request.content or b"{}")
        return httpx.Response(200, json={
            "success": True,
            "message": f"Appointment booked for {body['date']} at {body['start_time']}.",
            "data": {"appointment": {"_id": "apt-1001", "status": "pending"}},
        })
    if path.endswith("/like"):
        # The demo server is having a bad day.
        return httpx.Response(503, json={"message": "Service unavailable"})
    if path.endswith("/save"):
        return httpx.Response(200, json={"success": True, "data": {"saved_by": ["demo-user"]}})
    return httpx.Response(404, json={"message": "Not found"})


class ConsoleSession:
    """Runs the booking walkthrough in the terminal."""

    SCENARIOS = ["calendar", "slots", "draft", "booking", "toggle"]

    def __init__(self, today: Optional[date] = None, now_minutes: Optional[int] = None) -> None:
        self.today = today or date.today()
        self.now_minutes = now_minutes
        self.provider = ProviderRecord.model_validate(DEMO_PROVIDER)
        self.schedule = WorkingHoursSchedule.from_provider(self.provider)
        self.store = BookingDraftStore()
        self.api = ApiClient(
            base_url=settings.api.base_url,
            token_provider=lambda: "demo-token",
            transport=httpx.MockTransport(_demo_backend),
        )

    def say(self, text: str) -> None:
        print(f"{GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def header(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  CARESLOT - {title}{RESET}")
        print(f"{BOLD}  Provider: {self.provider.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    def show_calendar(self) -> None:
        self.header("Month view")
        nav = CalendarNavigator(self.schedule, ViewMode.MONTH, today=self.today)
        print(f"\n{BOLD}{nav.label:^35}{RESET}")
        print(" ".join(f"{d:>4}" for d in ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]))
        cells = nav.cells
        for week in range(0, len(cells), 7):
            row = []
            for cell in cells[week:week + 7]:
                text = f"{cell.date.day:>4}"
                if cell.is_today:
                    text = f"{YELLOW}{BOLD}{text}{RESET}"
                elif not cell.in_focused_period or not cell.is_selectable:
                    text = f"{DIM}{text}{RESET}"
                row.append(text)
            print(" ".join(row))
        nav.next()
        self.system_log(f"Next month: {nav.label}")
        nav.today()
        self.system_log(f"Back to today: {nav.label}")

    def show_slots(self) -> None:
        self.header("Available times")
        buckets = build_slot_buckets(self.schedule, today=self.today, now_minutes=self.now_minutes)
        self._print_bucket("Today", self.today, buckets.today_slots)
        self._print_bucket("Tomorrow", buckets.tomorrow, buckets.tomorrow_slots)
        if buckets.next_available_date:
            self._print_bucket("Next available", buckets.next_available_date, buckets.next_available_slots)
        else:
            self.say("No availability in the next few weeks.")

    def _print_bucket(self, title: str, day: date, slots: list[Slot]) -> None:
        labels = ", ".join(slot.label for slot in slots) or "no times left"
        print(f"\n{BLUE}{title} ({day.strftime('%a %d %b')}){RESET}: {labels}")

    def show_draft(self) -> None:
        self.header("Booking draft")
        draft = self.store.resolve_selection(self.provider, today=self.today)
        self.system_log(f"Fresh selection: {draft.service} on {draft.date}, time={draft.time}")
        buckets = build_slot_buckets(self.schedule, today=self.today, now_minutes=self.now_minutes)
        day, slots = self._first_bookable(buckets)
        draft = draft.with_date(day).with_time(slots[0])
        self.store.save(draft)
        self.say(f"Saved: {draft.service} on {draft.date} at {draft.time}")
        restored = self.store.resolve_selection(self.provider, today=self.today, schedule=self.schedule)
        self.system_log(f"Restored after reload: {restored.date} at {restored.time}")

    def _first_bookable(self, buckets) -> tuple[date, list[Slot]]:
        if buckets.today_slots:
            return self.today, buckets.today_slots
        if buckets.tomorrow_slots:
            return buckets.tomorrow, buckets.tomorrow_slots
        return buckets.next_available_date or self.today + timedelta(days=1), buckets.next_available_slots

    async def run_booking(self) -> None:
        self.show_draft()
        self.header("Submit booking")
        draft = self.store.load(self.provider.id)
        submitter = BookingSubmitter(BookingApiClient(self.api), self.store)

        incomplete = draft.with_time(None)
        result = await submitter.submit(incomplete, BookingFormData(patient_name="Jane Citizen"))
        print(f"{RED}  {result['message']}{RESET}")

        result = await submitter.submit(draft, BookingFormData(patient_name="Jane Citizen"))
        colour = GREEN if result["success"] else RED
        print(f"{colour}  {result['message']}{RESET}")
        self.system_log(f"Appointment id: {result.get('appointment_id')}")
        self.system_log(f"Draft cleared: {self.store.load(self.provider.id) is None}")

    async def run_toggle(self) -> None:
        self.header("Optimistic like / save")
        interactions = InteractionApiClient(self.api)

        def notify(level: str, message: str) -> None:
            print(f"{RED if level == 'error' else GREEN}  [{level}] {message}{RESET}")

        like_review = interactions.action_for(EntityKind.REVIEW_LIKE)

        async def slow_like(entity_id, desired, token):
            await asyncio.sleep(0.3)
            return await like_review(entity_id, desired, token)

        likes = OptimisticInteractionCoordinator(
            action=slow_like,
            current_user=lambda: "demo-user",
            notifier=notify,
        )
        likes.register(OptimisticEntity(
            id="rev-7", kind=EntityKind.REVIEW_LIKE,
            participant_ids=frozenset({"u1", "u2", "u3"}), count=3,
        ))
        self.system_log(f"Before: {likes.get('rev-7')}")
        pending = asyncio.ensure_future(likes.toggle("rev-7"))
        await asyncio.sleep(0)
        self.system_log(f"Optimistic: liked={likes.get('rev-7').toggled} count={likes.get('rev-7').count}")
        outcome = await pending
        self.system_log(f"{outcome.status.value}: liked={outcome.entity.toggled} count={outcome.entity.count}")

        saves = OptimisticInteractionCoordinator(
            action=interactions.action_for(EntityKind.REVIEW_SAVE),
            current_user=lambda: "demo-user",
            notifier=notify,
            success_message=lambda e: "Review saved" if e.toggled else "Review removed from saved",
        )
        saves.register(OptimisticEntity(id="rev-7", kind=EntityKind.REVIEW_SAVE))
        outcome = await saves.toggle("rev-7")
        self.system_log(f"{outcome.status.value}: saved={outcome.entity.toggled} count={outcome.entity.count}")
        self.system_log(f"Lifecycle: {' -> '.join(saves.lifecycle('rev-7').get_state_trace())}")

    async def run_scenario(self, scenario: str) -> None:
        if scenario not in self.SCENARIOS:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return
        try:
            if scenario == "calendar":
                self.show_calendar()
            elif scenario == "slots":
                self.show_slots()
            elif scenario == "draft":
                self.show_draft()
            elif scenario == "booking":
                await self.run_booking()
            else:
                await self.run_toggle()
        finally:
            await self.api.aclose()

    async def run(self) -> None:
        try:
            self.show_calendar()
            self.show_slots()
            await self.run_booking()
            await self.run_toggle()
        finally:
            await self.api.aclose()
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Walkthrough complete.{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=ConsoleSession.SCENARIOS,
        default=None,
        help="Run a single part of the walkthrough",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
