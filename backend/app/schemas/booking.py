# backend/app/schemas/booking.py
"""
Booking schemas for the staff dashboard.

Instants are exchanged as ISO-8601 strings. A start time without an offset is
read as wall-clock time in the workspace timezone.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from ..models.booking import Booking, BookingStatus
from ._strict_base import StrictRequestModel
from .base import StandardizedModel, TimestampedModel


class BookingStatusUpdate(StrictRequestModel):
    """Request a lifecycle transition."""

    status: BookingStatus
    reason: Optional[str] = Field(None, max_length=500)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().upper()
        return v


class StaffBookingCreate(StrictRequestModel):
    """
    Booking entered from the dashboard.

    Either an existing contact id or contact details (email or phone) resolve
    who the booking is for.
    """

    booking_type_id: str = Field(..., min_length=1)
    start_time: datetime
    contact_id: Optional[str] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("contact_id", "email", "phone", "first_name", "last_name", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def require_contact(self) -> "StaffBookingCreate":
        if not self.contact_id and not self.email and not self.phone:
            raise ValueError("Either contactId, email or phone is required")
        return self


class BookingReschedule(StrictRequestModel):
    start_time: datetime


class SlotResponse(TimestampedModel):
    """A reservable interval."""

    duration: int


class ContactSummary(StandardizedModel):
    id: str
    display_name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class BookingTypeSummary(StandardizedModel):
    id: str
    name: str
    duration: int
    location: Optional[str] = None


class BookingResponse(TimestampedModel):
    """Booking as returned to staff."""

    id: str
    status: BookingStatus
    reference_code: str
    notes: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    booking_type: Optional[BookingTypeSummary] = None
    contact: Optional[ContactSummary] = None
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            status=booking.status,
            reference_code=booking.reference_code,
            start_time=booking.start_time,
            end_time=booking.end_time,
            notes=booking.notes,
            metadata=dict(booking.booking_metadata or {}),
            booking_type=(
                BookingTypeSummary.model_validate(booking.booking_type)
                if booking.booking_type is not None
                else None
            ),
            contact=(
                ContactSummary.model_validate(booking.contact)
                if booking.contact is not None
                else None
            ),
            created_at=booking.created_at,
            confirmed_at=booking.confirmed_at,
            completed_at=booking.completed_at,
            cancelled_at=booking.cancelled_at,
            cancellation_reason=booking.cancellation_reason,
        )
