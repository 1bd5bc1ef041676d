"""
Centralized configuration module for application-wide settings.

Every setting is read from the environment once at import time and exposed as
a module-level constant, with a ``get_*`` function that performs the parsing
so tests can re-evaluate it after patching the environment.
"""

import json
import logging
import os
from typing import Optional
from zoneinfo import ZoneInfo

from parlor_booking.domain.availability import (
    WEEKDAY_KEYS,
    BusinessHours,
    BusinessSchedule,
)

logger = logging.getLogger(__name__)

# ===========================
# Timezone Configuration
# ===========================


def get_app_timezone() -> ZoneInfo:
    """
    Get the application timezone from environment variable.

    Environment Variables:
        TZ: Timezone identifier (e.g., 'America/New_York', 'UTC')
            Default: 'UTC'
    """
    tz_name = os.getenv("TZ", "UTC")

    try:
        return ZoneInfo(tz_name)
    except Exception as e:
        logger.warning(
            f"Invalid timezone '{tz_name}' specified in TZ environment variable. "
            f"Falling back to UTC. Error: {e}"
        )
        return ZoneInfo("UTC")


APP_TZ = get_app_timezone()


def log_timezone_config():
    """Log the active timezone configuration at startup."""
    logger.info(
        "Timezone configuration initialized",
        extra={
            "context": {
                "timezone": str(APP_TZ),
                "tz_env_var": os.getenv("TZ", "UTC"),
            }
        },
    )


# ===========================
# Business Hours Configuration
# ===========================

DEFAULT_OPENING_TIME = "09:00"
DEFAULT_CLOSING_TIME = "19:00"


def _parse_hours_value(day: str, value) -> Optional[BusinessHours]:
    if value is None:
        return None
    if not isinstance(value, str) or "-" not in value:
        raise ValueError(f"Business hours for '{day}' must look like 'HH:MM-HH:MM'")
    start, end = (part.strip() for part in value.split("-", 1))
    return BusinessHours(start=start, end=end)


def get_business_schedule() -> BusinessSchedule:
    """
    Get the weekly business hours.

    Environment Variables:
        BUSINESS_HOURS: JSON object keyed by weekday ('mon' .. 'sun'). Each value
            is either "HH:MM-HH:MM" or null for a closed day. Days that are not
            listed keep the default opening hours.
            Default: every day 09:00-19:00

    Examples:
        >>> # BUSINESS_HOURS={"sat": "09:00-20:00", "sun": null}
        >>> schedule = get_business_schedule()
        >>> schedule.hours_for_weekday(6)  # None, closed on Sundays
    """
    default_hours = BusinessHours(start=DEFAULT_OPENING_TIME, end=DEFAULT_CLOSING_TIME)
    raw = os.getenv("BUSINESS_HOURS", "").strip()
    if not raw:
        return BusinessSchedule.uniform(default_hours)

    try:
        overrides = json.loads(raw)
        if not isinstance(overrides, dict):
            raise ValueError("BUSINESS_HOURS must be a JSON object")

        days = {}
        for key in WEEKDAY_KEYS:
            if key in overrides:
                days[key] = _parse_hours_value(key, overrides[key])
            else:
                days[key] = default_hours

        unknown = set(overrides) - set(WEEKDAY_KEYS)
        if unknown:
            logger.warning(
                "Ignoring unknown weekday keys in BUSINESS_HOURS",
                extra={"context": {"keys": sorted(unknown)}},
            )
        return BusinessSchedule(days)
    except ValueError as e:
        logger.warning(
            f"Invalid BUSINESS_HOURS value. Falling back to defaults. Error: {e}",
            extra={"context": {"business_hours": raw}},
        )
        return BusinessSchedule.uniform(default_hours)


BUSINESS_SCHEDULE = get_business_schedule()


def get_slot_granularity_minutes() -> int:
    """
    Get the step between candidate slot start times.

    Environment Variables:
        SLOT_GRANULARITY_MINUTES: positive integer, default 30
    """
    raw = os.getenv("SLOT_GRANULARITY_MINUTES", "30")
    try:
        value = int(raw)
        if value <= 0:
            raise ValueError("must be positive")
        return value
    except (TypeError, ValueError):
        logger.warning(
            f"Invalid SLOT_GRANULARITY_MINUTES '{raw}'. Falling back to 30."
        )
        return 30


SLOT_GRANULARITY_MINUTES = get_slot_granularity_minutes()


def log_booking_config():
    """Log the active scheduling configuration at startup."""
    logger.info(
        "Booking configuration initialized",
        extra={
            "context": {
                "business_hours": BUSINESS_SCHEDULE.describe(),
                "slot_granularity_minutes": SLOT_GRANULARITY_MINUTES,
            }
        },
    )


# ===========================
# Calendar Sync Configuration
# ===========================


def get_google_calendar_access_token() -> Optional[str]:
    """
    Get the OAuth access token used for calendar sync.

    Environment Variables:
        GOOGLE_CALENDAR_ACCESS_TOKEN: bearer token for the Google Calendar API.
            Default: None (calendar sync disabled)
    """
    token = os.getenv("GOOGLE_CALENDAR_ACCESS_TOKEN", "").strip()
    return token or None


def get_calendar_enabled() -> bool:
    """Calendar sync runs only when a token is configured."""
    return get_google_calendar_access_token() is not None


GOOGLE_CALENDAR_ID = os.getenv("GOOGLE_CALENDAR_ID", "primary")
CALENDAR_TIMEZONE = os.getenv("CALENDAR_TIMEZONE", "America/New_York")
BUSINESS_EMAIL = os.getenv("BUSINESS_EMAIL", "parlor@beauty.com")


def log_calendar_config():
    """Log whether calendar sync is active (without exposing the token)."""
    logger.info(
        "Calendar sync configuration initialized",
        extra={
            "context": {
                "enabled": get_calendar_enabled(),
                "calendar_id": GOOGLE_CALENDAR_ID,
                "calendar_timezone": CALENDAR_TIMEZONE,
            }
        },
    )


# ===========================
# Rate Limiting Configuration
# ===========================


def get_rate_limit_default() -> str:
    """
    Get the default rate limit applied to every API route.

    Environment Variables:
        RATE_LIMIT_DEFAULT: flask-limiter expression
            Default: '100 per 15 minutes'
    """
    return os.getenv("RATE_LIMIT_DEFAULT", "100 per 15 minutes")


RATE_LIMIT_DEFAULT = get_rate_limit_default()


def get_rate_limit_enabled() -> bool:
    """
    Environment Variables:
        RATE_LIMIT_ENABLED: '0' disables rate limiting (used by the test suite)
    """
    return os.getenv("RATE_LIMIT_ENABLED", "1").strip().lower() not in (
        "0",
        "false",
        "no",
    )
