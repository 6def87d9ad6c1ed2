"""
Booking submission: turns a completed draft into a Booking API call.

Incomplete selections are refused locally with an inline message and
never reach the network. Only one submission per provider may be in
flight at a time. A confirmed booking clears the provider's draft.
"""

import re
from typing import Optional, TypedDict

from careslot.cancellation import CancellationToken, OperationCancelled
from careslot.clients.booking_api import BookingApiClient
from careslot.errors import RemoteCallError, ValidationError, classify_failure
from careslot.logging_context import get_request_logger, new_request_id
from careslot.schemas.booking_schema import BookingFormData, BookingRequest
from careslot.scheduling.booking_draft import BookingDraft, BookingDraftStore
from careslot.utils import format_date_key

logger = get_request_logger(__name__)

ALREADY_BOOKED_MESSAGE = "This time slot is already booked. Please choose another time."
SLOT_UNAVAILABLE_MESSAGE = "Unable to book this slot. Please choose another time."
IN_PROGRESS_MESSAGE = "A booking is already in progress."

_DUPLICATE_PATTERN = re.compile(r"duplicate key|E11000", re.IGNORECASE)


class BookingResult(TypedDict, total=False):
    """Result of BookingSubmitter.submit."""

    success: bool
    message: str
    appointment_id: str
    error_kind: str
    missing: list[str]


def validate_draft(draft: BookingDraft) -> None:
    """
    Check that a draft can be submitted.

    Raises:
        ValidationError: With the missing field names, when the service,
            date or time has not been chosen.
    """
    missing = [
        name
        for name, value in [
            ("service", draft.service_id),
            ("date", draft.date),
            ("time", draft.time),
        ]
        if not value
    ]
    if missing:
        raise ValidationError(
            f"Please choose a {', '.join(missing)} before continuing.", missing=missing
        )


def build_request(
    draft: BookingDraft, form_data: BookingFormData, notes: Optional[str] = None
) -> BookingRequest:
    validate_draft(draft)
    return BookingRequest(
        provider_id=draft.provider_id,
        service_id=draft.service_id,
        date=format_date_key(draft.date),
        start_time=draft.time.label,
        end_time=draft.time.end_label,
        form_data=form_data,
        notes=notes if notes is not None else (form_data.comments or ""),
    )


class BookingSubmitter:
    """Submits drafts and keeps the draft store in step with the outcome."""

    def __init__(self, booking_api: BookingApiClient, store: BookingDraftStore) -> None:
        self.booking_api = booking_api
        self.store = store
        self._in_flight: set[str] = set()

    def is_submitting(self, provider_id: str) -> bool:
        return provider_id in self._in_flight

    async def submit(
        self,
        draft: BookingDraft,
        form_data: Optional[BookingFormData] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BookingResult:
        """Validate and book ``draft``. Never raises for remote failures."""
        try:
            request = build_request(draft, form_data or BookingFormData())
        except ValidationError as exc:
            logger.info("Booking for provider %s not submitted: missing %s", draft.provider_id, exc.missing)
            return {"success": False, "message": str(exc), "error_kind": "validation", "missing": exc.missing}

        if draft.provider_id in self._in_flight:
            logger.debug("Duplicate submission for provider %s refused", draft.provider_id)
            return {"success": False, "message": IN_PROGRESS_MESSAGE, "error_kind": "in_progress"}

        self._in_flight.add(draft.provider_id)
        new_request_id(f"book-{draft.provider_id}")
        try:
            response = await self.booking_api.book_appointment(request, cancel_token=cancel_token)
        except OperationCancelled:
            return {"success": False, "message": "Booking cancelled.", "error_kind": "cancelled"}
        except RemoteCallError as exc:
            if _DUPLICATE_PATTERN.search(str(exc)):
                logger.info("Slot %s %s already taken", request.date, request.start_time)
                return {"success": False, "message": ALREADY_BOOKED_MESSAGE, "error_kind": "rejected"}
            failure = classify_failure(exc)
            logger.warning("Booking failed (%s): %s", failure.kind.value, exc)
            return {"success": False, "message": failure.message, "error_kind": failure.kind.value}
        finally:
            self._in_flight.discard(draft.provider_id)

        if not response.success:
            return {
                "success": False,
                "message": response.message or SLOT_UNAVAILABLE_MESSAGE,
                "error_kind": "rejected",
            }

        appointment = response.appointment
        self.store.clear(draft.provider_id)
        logger.info(
            "Appointment %s booked with provider %s",
            appointment.id if appointment else "(no id)", draft.provider_id,
        )
        result: BookingResult = {
            "success": True,
            "message": response.message or "Appointment booked.",
        }
        if appointment:
            result["appointment_id"] = appointment.id
        return result
