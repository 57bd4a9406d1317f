"""
Database models for the booking engine.

- Workspace: tenant boundary and timezone
- Contact: person booking appointments
- BookingType / AvailabilityRule: bookable services and their weekly windows
- Booking: committed reservations
- EventOutbox: pending booking events
"""

from .booking import ACTIVE_STATUSES, TERMINAL_STATUSES, Booking, BookingStatus
from .booking_type import AvailabilityRule, BookingType
from .contact import Contact
from .event_outbox import EventOutbox, EventOutboxStatus
from .workspace import Workspace

__all__ = [
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "AvailabilityRule",
    "Booking",
    "BookingStatus",
    "BookingType",
    "Contact",
    "EventOutbox",
    "EventOutboxStatus",
    "Workspace",
]
