"""Shared utilities used across the scheduling engine."""

from datetime import date, timedelta


def parse_date_key(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string as a local calendar date.

    The string is split into year, month and day integers and the date is
    rebuilt from them, so it can never be reinterpreted as a UTC instant.

    Examples:
        >>> parse_date_key("2025-04-10")
        datetime.date(2025, 4, 10)
        >>> parse_date_key(" 2025-4-9 ")
        datetime.date(2025, 4, 9)
    """
    parts = value.strip().split("-")
    if len(parts) != 3:
        raise ValueError(f"Expected YYYY-MM-DD, got {value!r}")
    try:
        year, month, day = (int(p) for p in parts)
    except ValueError:
        raise ValueError(f"Expected YYYY-MM-DD, got {value!r}") from None
    return date(year, month, day)


def format_date_key(value: date) -> str:
    """Format a local calendar date as ``YYYY-MM-DD``."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def start_of_week(value: date) -> date:
    """Return the Monday on or before ``value``."""
    return value - timedelta(days=value.weekday())
