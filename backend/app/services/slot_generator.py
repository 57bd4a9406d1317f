# backend/app/services/slot_generator.py
"""
Slot generation from weekly availability rules.

Pure functions: given a booking type's duration, a local date, its rules and
the workspace timezone, produce the ordered candidate slots for that date.
Nothing here reads bookings; overlap removal is the conflict filter's job.

Slots are laid back-to-back from each rule's start with a stride equal to the
duration. There is no separate granularity setting.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Protocol

import pytz

from ..core.exceptions import ValidationException
from ..core.timezone_utils import ensure_utc, js_weekday, local_to_utc, parse_hhmm, utc_now


class WeeklyWindow(Protocol):
    """Anything shaped like an availability rule."""

    day_of_week: int
    start_time: str
    end_time: str


@dataclass(frozen=True, order=True)
class Slot:
    """Concrete candidate interval [start, end) in UTC."""

    start: datetime
    end: datetime
    duration: int

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.start < end and start < self.end


def rules_for_day(rules: Iterable[WeeklyWindow], day: date) -> List[WeeklyWindow]:
    """Rules whose day_of_week (0 = Sunday) matches ``day``."""
    weekday = js_weekday(day)
    return [rule for rule in rules if rule.day_of_week == weekday]


def slots_for_rule(
    rule: WeeklyWindow, day: date, duration: int, tz: pytz.BaseTzInfo
) -> List[Slot]:
    """Back-to-back slots that fit entirely inside one rule's window."""
    window_start = local_to_utc(day, parse_hhmm(rule.start_time), tz)
    window_end = local_to_utc(day, parse_hhmm(rule.end_time), tz)
    step = timedelta(minutes=duration)

    slots: List[Slot] = []
    slot_start = window_start
    while slot_start + step <= window_end:
        slots.append(Slot(start=slot_start, end=slot_start + step, duration=duration))
        slot_start += step
    return slots


def generate_slots(
    duration: int,
    day: date,
    rules: Iterable[WeeklyWindow],
    tz: pytz.BaseTzInfo,
    now: Optional[datetime] = None,
) -> List[Slot]:
    """
    Candidate slots for ``day`` (a date in the workspace timezone).

    Args:
        duration: Booking type duration in minutes
        day: Local calendar date
        rules: Availability rules of the booking type (any weekday)
        tz: Workspace timezone
        now: Reference instant; slots starting at or before it are dropped

    Returns:
        Slots ordered by start. Windows of several rules are unioned; only
        exactly identical intervals are collapsed.
    """
    if duration is None or duration <= 0:
        raise ValidationException(
            "Booking type duration must be positive",
            details={"field": "duration", "value": duration},
        )

    cutoff = ensure_utc(now) if now is not None else utc_now()

    unique = set()
    for rule in rules_for_day(rules, day):
        unique.update(slots_for_rule(rule, day, duration, tz))

    return sorted(slot for slot in unique if slot.start > cutoff)


def is_generated_start(
    duration: int,
    day: date,
    rules: Iterable[WeeklyWindow],
    tz: pytz.BaseTzInfo,
    start: datetime,
    now: Optional[datetime] = None,
) -> bool:
    """Whether ``start`` is the start of a slot the rules produce for ``day``."""
    start = ensure_utc(start)
    return any(slot.start == start for slot in generate_slots(duration, day, rules, tz, now))
