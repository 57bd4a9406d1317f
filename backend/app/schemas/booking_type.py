# backend/app/schemas/booking_type.py
"""
Booking type and availability rule schemas.

Availability rules are weekly windows in the workspace timezone:
day_of_week uses 0 = Sunday ... 6 = Saturday and times are "HH:MM" strings.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictRequestModel
from .base import StandardizedModel

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class AvailabilityRuleCreate(StrictRequestModel):
    """Add a weekly window to a booking type."""

    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: str = Field(..., pattern=HHMM_PATTERN, description="Local start, HH:MM")
    end_time: str = Field(..., pattern=HHMM_PATTERN, description="Local end, HH:MM")


class AvailabilityRuleResponse(StandardizedModel):
    id: str
    day_of_week: int
    start_time: str
    end_time: str


class BookingTypeCreate(StrictRequestModel):
    """
    Create a booking type.

    When ``availability`` is omitted the type is seeded with the workspace's
    business hours, or the platform default week.
    """

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    duration: int = Field(..., gt=0, le=1440, description="Duration in minutes")
    location: Optional[str] = Field(None, max_length=255)
    availability: Optional[List[AvailabilityRuleCreate]] = None


class BookingTypeUpdate(StrictRequestModel):
    """Partial update; only provided fields change."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    duration: Optional[int] = Field(None, gt=0, le=1440)
    location: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None


class BookingTypeResponse(StandardizedModel):
    id: str
    name: str
    description: Optional[str] = None
    duration: int
    location: Optional[str] = None
    is_active: bool
    availability_rules: List[AvailabilityRuleResponse] = []
    created_at: Optional[datetime] = None


class PublicBookingTypeResponse(StandardizedModel):
    """Booking type as shown on the public booking page."""

    id: str
    name: str
    description: Optional[str] = None
    duration: int
    location: Optional[str] = None


class AvailableDateResponse(StandardizedModel):
    date: str
    day_of_week: int
