"""
Centralized configuration with environment variable overrides.

Slot policy, draft expiry, and API transport settings are configurable
here. Nothing is hardcoded in the scheduling or interaction logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class SchedulingConfig:
    """Slot generation and calendar search policy."""

    slot_step_minutes: int = _safe_int("SLOT_STEP_MINUTES", "60")
    slot_buffer_minutes: int = _safe_int("SLOT_BUFFER_MINUTES", "30")
    appointment_duration_minutes: int = _safe_int("APPOINTMENT_DURATION_MINUTES", "30")
    next_available_horizon_days: int = _safe_int("NEXT_AVAILABLE_HORIZON_DAYS", "30")


@dataclass(frozen=True)
class DraftConfig:
    """Booking draft persistence settings."""

    ttl_hours: float = _safe_float("DRAFT_TTL_HOURS", "24")
    storage_path: str = os.getenv("DRAFT_STORAGE_PATH", ".careslot/booking_drafts.json")


@dataclass(frozen=True)
class ApiConfig:
    """Transport settings shared by the collaborator API clients."""

    base_url: str = os.getenv("API_BASE_URL", "http://localhost:6000")
    timeout_seconds: float = _safe_float("API_TIMEOUT_SECONDS", "10")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    drafts: DraftConfig = field(default_factory=DraftConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "careslot")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.scheduling.slot_step_minutes < 1:
        raise ValueError(
            f"SLOT_STEP_MINUTES must be >= 1, got {config.scheduling.slot_step_minutes}"
        )
    if config.scheduling.slot_buffer_minutes < 0:
        raise ValueError(
            f"SLOT_BUFFER_MINUTES must be >= 0, got {config.scheduling.slot_buffer_minutes}"
        )
    if config.scheduling.appointment_duration_minutes < 1:
        raise ValueError(
            "APPOINTMENT_DURATION_MINUTES must be >= 1, "
            f"got {config.scheduling.appointment_duration_minutes}"
        )
    if config.scheduling.next_available_horizon_days < 1:
        raise ValueError(
            "NEXT_AVAILABLE_HORIZON_DAYS must be >= 1, "
            f"got {config.scheduling.next_available_horizon_days}"
        )
    if config.drafts.ttl_hours <= 0:
        raise ValueError(f"DRAFT_TTL_HOURS must be > 0, got {config.drafts.ttl_hours}")
    if not config.drafts.storage_path.strip():
        raise ValueError("DRAFT_STORAGE_PATH must not be empty")
    if config.api.timeout_seconds <= 0:
        raise ValueError(
            f"API_TIMEOUT_SECONDS must be > 0, got {config.api.timeout_seconds}"
        )
    if not config.api.base_url.startswith(("http://", "https://")):
        raise ValueError(f"API_BASE_URL must be an http(s) URL, got {config.api.base_url!r}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
