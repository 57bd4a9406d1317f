# backend/app/services/conflict_filter.py
"""
Removes candidate slots that collide with existing bookings.

Intervals are half-open: [start, end). Back-to-back intervals do not overlap.
Only bookings that still hold their interval (PENDING, CONFIRMED, COMPLETED)
block a slot; CANCELLED and NO_SHOW release it.

Callers pass bookings of a single booking type. Conflicts across booking types
sharing a location are not detected.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Protocol

from ..core.timezone_utils import ensure_utc
from ..models.booking import ACTIVE_STATUSES
from .slot_generator import Slot

_BLOCKING = {s.value for s in ACTIVE_STATUSES}


class TimedBooking(Protocol):
    id: str
    start_time: datetime
    end_time: datetime
    status: str


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    return a_start < b_end and b_start < a_end


def blocking_bookings(bookings: Iterable[TimedBooking]) -> List[TimedBooking]:
    return [b for b in bookings if b.status in _BLOCKING]


def find_conflicts(
    start: datetime,
    end: datetime,
    bookings: Iterable[TimedBooking],
    exclude_booking_id: Optional[str] = None,
) -> List[TimedBooking]:
    """Blocking bookings overlapping [start, end)."""
    start, end = ensure_utc(start), ensure_utc(end)
    return [
        b
        for b in blocking_bookings(bookings)
        if b.id != exclude_booking_id
        and intervals_overlap(start, end, ensure_utc(b.start_time), ensure_utc(b.end_time))
    ]


def filter_conflicts(candidates: Iterable[Slot], bookings: Iterable[TimedBooking]) -> List[Slot]:
    """Candidates that overlap no blocking booking, order preserved."""
    busy = [
        (ensure_utc(b.start_time), ensure_utc(b.end_time)) for b in blocking_bookings(bookings)
    ]
    return [
        slot
        for slot in candidates
        if not any(slot.overlaps(s, e) for s, e in busy)
    ]
