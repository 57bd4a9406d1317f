"""
Pydantic schemas for the booking engine API.

Request models reject unknown fields; response models serialize with
camelCase aliases and UTC instants.
"""

from .booking import (
    BookingReschedule,
    BookingResponse,
    BookingStatusUpdate,
    BookingTypeSummary,
    ContactSummary,
    SlotResponse,
    StaffBookingCreate,
)
from .booking_type import (
    AvailabilityRuleCreate,
    AvailabilityRuleResponse,
    AvailableDateResponse,
    BookingTypeCreate,
    BookingTypeResponse,
    BookingTypeUpdate,
    PublicBookingTypeResponse,
)
from .public_booking import (
    BookingConfirmation,
    ConfirmationBookingType,
    ConfirmationContact,
    PublicBookingCreate,
)

__all__ = [
    # Bookings
    "BookingReschedule",
    "BookingResponse",
    "BookingStatusUpdate",
    "BookingTypeSummary",
    "ContactSummary",
    "SlotResponse",
    "StaffBookingCreate",
    # Booking types
    "AvailabilityRuleCreate",
    "AvailabilityRuleResponse",
    "AvailableDateResponse",
    "BookingTypeCreate",
    "BookingTypeResponse",
    "BookingTypeUpdate",
    "PublicBookingTypeResponse",
    # Public booking page
    "BookingConfirmation",
    "ConfirmationBookingType",
    "ConfirmationContact",
    "PublicBookingCreate",
]
