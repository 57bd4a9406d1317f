"""Booking domain events."""
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class BookingCreated:
    """Fired after a reservation is committed."""

    booking_id: str
    workspace_id: str
    booking_type_id: str
    contact_id: str
    reference_code: str
    status: str
    start_time: datetime
    end_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def idempotency_key(self) -> str:
        return f"BookingCreated:{self.booking_id}"


@dataclass
class BookingStatusChanged:
    """Fired after a lifecycle transition is applied."""

    booking_id: str
    workspace_id: str
    from_status: str
    to_status: str
    changed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def idempotency_key(self) -> str:
        # A booking enters each status at most once
        return f"BookingStatusChanged:{self.booking_id}:{self.to_status}"


@dataclass
class BookingCancelled:
    """Fired after a booking is cancelled."""

    booking_id: str
    workspace_id: str
    cancelled_at: datetime
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def idempotency_key(self) -> str:
        return f"BookingCancelled:{self.booking_id}"


@dataclass
class BookingRescheduled:
    """Fired after a booking moves to a new slot."""

    booking_id: str
    workspace_id: str
    previous_start_time: datetime
    start_time: datetime
    end_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def idempotency_key(self) -> str:
        return f"BookingRescheduled:{self.booking_id}:{self.start_time.isoformat()}"
