"""
Provider Directory client.

Fetches provider records (working hours and service catalog) and turns
them into the schedule model the slot engine reads.
"""

import logging
from typing import Optional

from careslot.cancellation import CancellationToken
from careslot.clients.api_client import ApiClient
from careslot.errors import RequestRejectedError
from careslot.schemas.provider_schema import ProviderRecord
from careslot.scheduling.time_model import WorkingHoursSchedule

logger = logging.getLogger(__name__)


class ProviderDirectoryClient:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def fetch_all(self, cancel_token: Optional[CancellationToken] = None) -> list[ProviderRecord]:
        body = await self.api.get("/api/v1/providers/all", cancel_token=cancel_token)
        providers = []
        for raw in body.get("data") or []:
            try:
                providers.append(ProviderRecord.model_validate(raw))
            except ValueError as exc:
                logger.warning("Skipping malformed provider record: %s", exc)
        return providers

    async def fetch_provider(
        self, provider_id: str, cancel_token: Optional[CancellationToken] = None
    ) -> Optional[ProviderRecord]:
        """Fetch one provider, or None if the directory does not know it."""
        try:
            body = await self.api.get(f"/api/v1/providers/{provider_id}", cancel_token=cancel_token)
        except RequestRejectedError as exc:
            if exc.status_code == 404:
                logger.info("Provider %s not found", provider_id)
                return None
            raise
        raw = body.get("data", body)
        return ProviderRecord.model_validate(raw)

    async def fetch_schedule(
        self, provider_id: str, cancel_token: Optional[CancellationToken] = None
    ) -> Optional[WorkingHoursSchedule]:
        provider = await self.fetch_provider(provider_id, cancel_token=cancel_token)
        if provider is None:
            return None
        return WorkingHoursSchedule.from_provider(provider)
