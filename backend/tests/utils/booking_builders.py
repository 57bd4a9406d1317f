from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional

import pytz


def next_monday(today: date | None = None) -> date:
    """Return the next Monday strictly after today (or the provided date)."""
    current = today or date.today()
    days_ahead = (7 - current.weekday()) % 7
    if days_ahead == 0:
        days_ahead = 7
    return current + timedelta(days=days_ahead)


def future_monday(weeks_ahead: int = 1) -> date:
    """Return a Monday in the future used for slot tests."""
    if weeks_ahead <= 0:
        raise ValueError("weeks_ahead must be positive")
    return next_monday() + timedelta(days=7 * (weeks_ahead - 1))


def at(day: date, hhmm: str, tz_name: str = "UTC") -> datetime:
    """UTC instant of a wall-clock time on ``day`` in ``tz_name``."""
    hour, minute = (int(part) for part in hhmm.split(":"))
    tz = pytz.timezone(tz_name)
    return tz.localize(datetime.combine(day, time(hour, minute))).astimezone(pytz.UTC)


def hhmm_pairs(slots: Iterable, tz_name: str = "UTC") -> List[tuple[str, str]]:
    """Render slots as local (start, end) HH:MM pairs for readable assertions."""
    tz = pytz.timezone(tz_name)
    return [
        (s.start.astimezone(tz).strftime("%H:%M"), s.end.astimezone(tz).strftime("%H:%M"))
        for s in slots
    ]


def iso_z(value: datetime) -> str:
    """Wire format of instants in API responses."""
    return value.astimezone(pytz.UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def monday_rule(start: str = "09:00", end: str = "11:00", day_of_week: int = 1) -> dict:
    return {"day_of_week": day_of_week, "start_time": start, "end_time": end}


def before(day: date, hhmm: str, tz_name: Optional[str] = None) -> datetime:
    """An instant one day before the given wall-clock time, for pinning ``now``."""
    return at(day, hhmm, tz_name or "UTC") - timedelta(days=1)
