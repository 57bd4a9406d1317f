# backend/app/schemas/public_booking.py
"""
Public booking page schemas.

The confirmation exposes what the booking page needs to render a receipt:
no workspace, contact or booking type identifiers.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from ..models.booking import BookingStatus
from ._strict_base import StrictRequestModel
from .base import StandardizedModel, TimestampedModel


class PublicBookingCreate(StrictRequestModel):
    """Booking request submitted from the public booking page."""

    booking_type_id: str = Field(..., min_length=1)
    start_time: datetime
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("email", "phone", "first_name", "last_name", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def require_contact_channel(self) -> "PublicBookingCreate":
        if not self.email and not self.phone:
            raise ValueError("Either email or phone is required")
        return self


class ConfirmationContact(StandardizedModel):
    name: str
    email: Optional[str] = None


class ConfirmationBookingType(StandardizedModel):
    name: str
    duration: int
    location: Optional[str] = None


class BookingConfirmation(TimestampedModel):
    """Receipt shown after a successful public booking."""

    reference_code: str
    status: BookingStatus
    booking_type: ConfirmationBookingType
    contact: ConfirmationContact
    created_at: Optional[datetime] = None
