"""Booking request/response and persisted draft data models."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class BookingFormData(BaseModel):
    """Patient details collected by the booking form."""
    model_config = ConfigDict(populate_by_name=True)

    for_whom: str = Field(default="Self", alias="forWhom")
    visited_before: bool = Field(default=False, alias="visitedBefore")
    identification_number: str = Field(default="", alias="identificationNumber")
    comments: Optional[str] = None
    communication_preference: Optional[str] = Field(default=None, alias="communicationPreference")
    patient_name: Optional[str] = Field(default=None, alias="patientName")
    patient_email: Optional[str] = Field(default=None, alias="patientEmail")
    patient_phone: Optional[str] = Field(default=None, alias="patientPhone")


class BookingRequest(BaseModel):
    """Payload accepted by the Booking API."""
    model_config = ConfigDict(populate_by_name=True)

    provider_id: str = Field(alias="providerId")
    service_id: str = Field(alias="serviceId")
    date: str
    start_time: str
    end_time: str
    form_data: BookingFormData = Field(default_factory=BookingFormData, alias="formData")
    notes: str = ""


class BookedAppointment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: Optional[str] = None


class BookingApiResponse(BaseModel):
    """Booking API result."""
    model_config = ConfigDict(extra="ignore")

    success: bool
    message: Optional[str] = None
    data: Optional[dict[str, Any]] = None

    @property
    def appointment(self) -> Optional[BookedAppointment]:
        raw = (self.data or {}).get("appointment")
        if not isinstance(raw, dict):
            return None
        appointment_id = raw.get("id") or raw.get("_id")
        if not appointment_id:
            return None
        return BookedAppointment.model_validate({**raw, "id": str(appointment_id)})


class DraftProvider(BaseModel):
    id: str
    name: str = ""
    address: str = ""
    image: Optional[str] = None


class DraftRecord(BaseModel):
    """Persisted shape of a booking draft.

    ``date`` stays a plain ``YYYY-MM-DD`` string here; it is converted with
    careslot.utils.parse_date_key by the draft store.
    """
    model_config = ConfigDict(populate_by_name=True)

    provider: DraftProvider
    service: str = ""
    service_id: Optional[str] = Field(default=None, alias="serviceId")
    date: str
    time: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, alias="durationMinutes")
    saved_at: float = Field(alias="savedAt")
