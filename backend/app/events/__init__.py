"""Booking domain events and their outbox publisher."""

from app.events.booking_events import (
    BookingCancelled,
    BookingCreated,
    BookingRescheduled,
    BookingStatusChanged,
)
from app.events.publisher import EventPublisher

__all__ = [
    "BookingCancelled",
    "BookingCreated",
    "BookingRescheduled",
    "BookingStatusChanged",
    "EventPublisher",
]
