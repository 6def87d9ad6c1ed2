"""Booking API client: hands a validated selection to the backend."""

import logging
from typing import Optional

from careslot.cancellation import CancellationToken
from careslot.clients.api_client import ApiClient
from careslot.schemas.booking_schema import BookingApiResponse, BookingRequest

logger = logging.getLogger(__name__)


class BookingApiClient:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def book_appointment(
        self, request: BookingRequest, cancel_token: Optional[CancellationToken] = None
    ) -> BookingApiResponse:
        body = await self.api.post(
            "/api/v1/appointments/book",
            json=request.model_dump(by_alias=True),
            cancel_token=cancel_token,
        )
        response = BookingApiResponse.model_validate(body)
        logger.info(
            "Booking %s for provider %s on %s at %s",
            "accepted" if response.success else "refused",
            request.provider_id, request.date, request.start_time,
        )
        return response
