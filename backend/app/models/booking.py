# backend/app/models/booking.py
"""
Booking model for the scheduling engine.

A booking reserves one [start_time, end_time) interval of a booking type for
a contact. end_time is fixed at creation from the booking type's duration and
is never recomputed when the type changes later.

Bookings are never physically deleted: cancellation and no-shows are statuses,
and the interval they held becomes reservable by a new booking record.
"""

from enum import Enum
import logging
from typing import Any

from sqlalchemy import DDL, CheckConstraint, Column, ForeignKey, Index, String, Text, event
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import JSONType, UTCDateTime

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"  # Awaiting staff confirmation
    CONFIRMED = "CONFIRMED"  # Confirmed by staff or auto-confirm policy
    COMPLETED = "COMPLETED"  # Appointment took place
    CANCELLED = "CANCELLED"  # Cancelled, slot released
    NO_SHOW = "NO_SHOW"  # Contact didn't attend, slot released


# Statuses that hold their interval
ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.COMPLETED)
# Statuses with no outgoing transitions
TERMINAL_STATUSES = (BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW)

_ACTIVE_SQL = "status IN ('PENDING', 'CONFIRMED', 'COMPLETED')"


class Booking(Base):
    """Committed reservation of a booking type interval."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)

    workspace_id = Column(String(26), ForeignKey("workspaces.id"), nullable=False, index=True)
    booking_type_id = Column(String(26), ForeignKey("booking_types.id"), nullable=False, index=True)
    contact_id = Column(String(26), ForeignKey("contacts.id"), nullable=False, index=True)

    start_time = Column(UTCDateTime, nullable=False, index=True)
    end_time = Column(UTCDateTime, nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    reference_code = Column(String(16), nullable=False)
    notes = Column(Text, nullable=True)
    booking_metadata = Column("metadata", JSONType, nullable=False, default=dict)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, onupdate=func.now())
    confirmed_at = Column(UTCDateTime, nullable=True)
    completed_at = Column(UTCDateTime, nullable=True)
    cancelled_at = Column(UTCDateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    workspace = relationship("Workspace")
    booking_type = relationship("BookingType")
    contact = relationship("Contact")

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', 'NO_SHOW')",
            name="ck_bookings_status",
        ),
        CheckConstraint("start_time < end_time", name="check_booking_time_order"),
        Index("uq_bookings_workspace_reference", "workspace_id", "reference_code", unique=True),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.PENDING.value
        logger.debug(
            "Creating booking for booking type %s at %s", self.booking_type_id, self.start_time
        )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: type={self.booking_type_id}, "
            f"{self.start_time}-{self.end_time}, status={self.status}, ref={self.reference_code}>"
        )


# Two active bookings of a type can never share a start instant
Index(
    "uq_bookings_active_slot",
    Booking.booking_type_id,
    Booking.start_time,
    unique=True,
    sqlite_where=Booking.status.in_([s.value for s in ACTIVE_STATUSES]),
    postgresql_where=Booking.status.in_([s.value for s in ACTIVE_STATUSES]),
)

Index("ix_bookings_workspace_start", Booking.workspace_id, Booking.start_time)

# PostgreSQL additionally rejects any overlap between active intervals of a type
event.listen(
    Booking.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        "ALTER TABLE bookings ADD CONSTRAINT bookings_no_overlap_per_booking_type "
        "EXCLUDE USING gist ("
        "booking_type_id WITH =, "
        "tstzrange(start_time, end_time, '[)') WITH &&"
        f") WHERE ({_ACTIVE_SQL})"
    ).execute_if(dialect="postgresql"),
)
