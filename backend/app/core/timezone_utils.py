"""
Timezone utilities for the booking engine.

Every workspace operates in a single IANA timezone. Availability rules are
local wall-clock times; bookings are stored as UTC instants.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

import pytz

from .exceptions import ValidationException


def get_timezone(tz_name: Optional[str]) -> pytz.BaseTzInfo:
    """Resolve an IANA timezone name, defaulting to UTC."""
    try:
        return pytz.timezone(tz_name or "UTC")
    except pytz.UnknownTimeZoneError:
        raise ValidationException(
            f"Unknown timezone: {tz_name}",
            details={"field": "timezone", "value": tz_name},
        )


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Return an aware UTC datetime (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)


def parse_hhmm(value: str) -> time:
    """Parse a local "HH:MM" string."""
    try:
        return datetime.strptime(value, "%H:%M").time()
    except (TypeError, ValueError):
        raise ValidationException(
            f"Invalid time '{value}', expected HH:MM",
            details={"value": value},
        )


def local_to_utc(day: date, local_time: time, tz: pytz.BaseTzInfo) -> datetime:
    """Combine a local date and wall-clock time in ``tz`` into a UTC instant."""
    local_dt = tz.localize(datetime.combine(day, local_time))
    return local_dt.astimezone(pytz.UTC)


def to_local(dt: datetime, tz: pytz.BaseTzInfo) -> datetime:
    return ensure_utc(dt).astimezone(tz)


def local_today(tz: pytz.BaseTzInfo, now: Optional[datetime] = None) -> date:
    """Today's date in the workspace timezone."""
    return to_local(now or utc_now(), tz).date()


def local_day_bounds(day: date, tz: pytz.BaseTzInfo) -> Tuple[datetime, datetime]:
    """UTC [start, end) covering the given local date."""
    start = local_to_utc(day, time.min, tz)
    end = local_to_utc(day + timedelta(days=1), time.min, tz)
    return start, end


def js_weekday(day: date) -> int:
    """Weekday number with Sunday = 0 ... Saturday = 6."""
    return (day.weekday() + 1) % 7
