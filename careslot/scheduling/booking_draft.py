"""
Durable client-side store for in-progress booking selections.

Drafts are keyed by provider id and expire after a configurable TTL.
A draft is only ever handed back for the provider it was saved for;
anything stale, expired or unreadable is discarded and the caller falls
back to provider defaults (first listed service, today, no time).

Dates are persisted as ``YYYY-MM-DD`` and read back with
careslot.utils.parse_date_key, never through a generic date parser.

Usage:
    store = BookingDraftStore(JsonFileDraftStorage(".careslot/drafts.json"))
    store.save(draft)
    draft = store.resolve_selection(provider, today=date.today())
    ...
    store.clear(provider.id)   # once the booking is confirmed
"""

import json
import logging
import os
import time
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from careslot.config import settings
from careslot.schemas.booking_schema import DraftProvider, DraftRecord
from careslot.schemas.provider_schema import ProviderRecord
from careslot.scheduling.slot_generator import find_slot, slots_for_date
from careslot.scheduling.time_model import Slot, TimeOfDay, WorkingHoursSchedule
from careslot.utils import format_date_key, parse_date_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingDraft:
    """The user's not-yet-submitted appointment selection."""

    provider_id: str
    date: date
    provider_name: str = ""
    provider_address: str = ""
    provider_image: Optional[str] = None
    service: str = ""
    service_id: Optional[str] = None
    time: Optional[Slot] = None

    @classmethod
    def default_for(cls, provider: ProviderRecord, today: date) -> "BookingDraft":
        """Fresh selection: first listed service, today, no time."""
        service = provider.default_service
        return cls(
            provider_id=provider.id,
            date=today,
            provider_name=provider.name,
            provider_address=provider.address_line,
            provider_image=provider.image,
            service=service.name if service else "",
            service_id=service.id if service else None,
        )

    def with_date(self, value: date) -> "BookingDraft":
        """Pick a new day; the time no longer applies."""
        return replace(self, date=value, time=None)

    def with_time(self, slot: Optional[Slot]) -> "BookingDraft":
        return replace(self, time=slot)

    def with_service(self, name: str, service_id: Optional[str] = None) -> "BookingDraft":
        return replace(self, service=name, service_id=service_id)

    def to_record(self, saved_at: float) -> DraftRecord:
        return DraftRecord(
            provider=DraftProvider(
                id=self.provider_id,
                name=self.provider_name,
                address=self.provider_address,
                image=self.provider_image,
            ),
            service=self.service,
            service_id=self.service_id,
            date=format_date_key(self.date),
            time=self.time.label if self.time else None,
            duration_minutes=self.time.duration_minutes if self.time else None,
            saved_at=saved_at,
        )

    @classmethod
    def from_record(cls, record: DraftRecord) -> "BookingDraft":
        slot = None
        if record.time:
            duration = record.duration_minutes or settings.scheduling.appointment_duration_minutes
            slot = Slot(start=TimeOfDay.parse(record.time), duration_minutes=duration)
        return cls(
            provider_id=record.provider.id,
            date=parse_date_key(record.date),
            provider_name=record.provider.name,
            provider_address=record.provider.address,
            provider_image=record.provider.image,
            service=record.service,
            service_id=record.service_id,
            time=slot,
        )


class DraftStorage(Protocol):
    """Backend holding serialized draft records keyed by provider id."""

    def read(self) -> dict[str, Any]: ...

    def write(self, records: dict[str, Any]) -> None: ...


class InMemoryDraftStorage:
    """Process-local storage. Records are kept as JSON text like on disk."""

    def __init__(self) -> None:
        self._raw = "{}"

    def read(self) -> dict[str, Any]:
        return json.loads(self._raw)

    def write(self, records: dict[str, Any]) -> None:
        self._raw = json.dumps(records)


class JsonFileDraftStorage:
    """One JSON document on disk holding every draft record."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = Path(path or settings.drafts.storage_path)

    def read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Unreadable draft file %s, starting empty: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Draft file %s does not hold an object, starting empty", self.path)
            return {}
        return data

    def write(self, records: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(records, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)


class BookingDraftStore:
    """
    Keyed, expiring cache of booking drafts.

    Writes are last-write-wins with no locking; the provider-id ownership
    check on load is what keeps one provider's selection from leaking into
    another provider's page.
    """

    def __init__(
        self,
        storage: Optional[DraftStorage] = None,
        ttl_hours: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.storage = storage if storage is not None else InMemoryDraftStorage()
        self.ttl_seconds = (settings.drafts.ttl_hours if ttl_hours is None else ttl_hours) * 3600
        self._clock = clock

    def save(self, draft: BookingDraft) -> None:
        records = self.storage.read()
        record = draft.to_record(saved_at=self._clock())
        records[draft.provider_id] = record.model_dump(by_alias=True, mode="json")
        self.storage.write(records)
        logger.debug(
            "Draft saved for provider %s: %s %s",
            draft.provider_id, record.date, record.time or "(no time)",
        )

    def _decode(self, key: str, raw: Any) -> Optional[BookingDraft]:
        """Turn a stored record back into a draft, or None if it must be discarded."""
        try:
            record = DraftRecord.model_validate(raw)
            draft = BookingDraft.from_record(record)
        except ValueError as exc:
            logger.warning("Discarding unreadable draft for %s: %s", key, exc)
            return None
        if record.provider.id != key:
            logger.info("Discarding draft stored under %s for provider %s", key, record.provider.id)
            return None
        if self._clock() - record.saved_at > self.ttl_seconds:
            logger.info("Discarding expired draft for provider %s", key)
            return None
        return draft

    def load(self, provider_id: str) -> Optional[BookingDraft]:
        """Return the draft saved for ``provider_id``, or None on a miss."""
        records = self.storage.read()
        if provider_id not in records:
            return None
        draft = self._decode(provider_id, records[provider_id])
        if draft is None:
            del records[provider_id]
            self.storage.write(records)
        return draft

    def load_latest(self) -> Optional[BookingDraft]:
        """Return the most recently saved live draft for any provider."""
        records = self.storage.read()
        latest: Optional[BookingDraft] = None
        latest_at = float("-inf")
        stale = []
        for key, raw in records.items():
            draft = self._decode(key, raw)
            if draft is None:
                stale.append(key)
                continue
            saved_at = float(raw.get("savedAt", 0))
            if saved_at > latest_at:
                latest, latest_at = draft, saved_at
        if stale:
            for key in stale:
                del records[key]
            self.storage.write(records)
        return latest

    def resolve_selection(
        self,
        provider: ProviderRecord,
        today: Optional[date] = None,
        schedule: Optional[WorkingHoursSchedule] = None,
        now_minutes: Optional[int] = None,
    ) -> BookingDraft:
        """Selection to show on a provider's page.

        Restores this provider's draft when there is one, else defaults.
        A draft dated in the past restarts from today; when a schedule is
        given, a stored time that is no longer offered is dropped.
        """
        today = today or date.today()
        draft = self.load(provider.id)
        if draft is None:
            return BookingDraft.default_for(provider, today)
        if not draft.service:
            default = BookingDraft.default_for(provider, today)
            draft = draft.with_service(default.service, default.service_id)
        if draft.date < today:
            return draft.with_date(today)
        if schedule is not None and draft.time is not None:
            offered = slots_for_date(schedule, draft.date, today, now_minutes)
            if find_slot(offered, draft.time.label) is None:
                logger.info("Stored time %s is no longer offered", draft.time.label)
                draft = draft.with_time(None)
        return draft

    def clear(self, provider_id: Optional[str] = None) -> None:
        """Forget one provider's draft, or every draft when no id is given."""
        if provider_id is None:
            self.storage.write({})
            logger.debug("All drafts cleared")
            return
        records = self.storage.read()
        if records.pop(provider_id, None) is not None:
            self.storage.write(records)
            logger.debug("Draft cleared for provider %s", provider_id)
