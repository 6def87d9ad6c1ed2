"""
Bounded forward search for the next open day.

The search is schedule-level only: it knows which weekdays the provider
works, not which slots are already booked, so a returned date can still
turn out to be fully booked.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from careslot.config import settings
from careslot.scheduling.time_model import WorkingHoursSchedule

logger = logging.getLogger(__name__)


def find_next_available(
    from_date: date,
    schedule: WorkingHoursSchedule,
    horizon_days: Optional[int] = None,
) -> Optional[date]:
    """Return the first date after ``from_date`` whose weekday is enabled.

    Returns None when nothing opens within ``horizon_days``; callers treat
    that as "no availability found", not as a fault.
    """
    horizon = settings.scheduling.next_available_horizon_days if horizon_days is None else horizon_days
    for offset in range(1, horizon + 1):
        candidate = from_date + timedelta(days=offset)
        if schedule.has_available_weekday(candidate):
            return candidate
    logger.info("No available day within %d days after %s", horizon, from_date.isoformat())
    return None


def upcoming_available_dates(
    from_date: date,
    schedule: WorkingHoursSchedule,
    limit: int = 5,
    horizon_days: Optional[int] = None,
) -> list[date]:
    """Get the next ``limit`` enabled dates after ``from_date`` within the horizon."""
    horizon = settings.scheduling.next_available_horizon_days if horizon_days is None else horizon_days
    results: list[date] = []
    for offset in range(1, horizon + 1):
        candidate = from_date + timedelta(days=offset)
        if schedule.has_available_weekday(candidate):
            results.append(candidate)
        if len(results) >= limit:
            break
    return results
