# backend/app/models/booking_type.py
"""
Booking type and availability rule models.

A booking type is a bookable service with a fixed duration. Its weekly
availability is a set of rules (day of week + local HH:MM window); several
rules on the same day form a union of windows and are not merged.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime


class BookingType(Base):
    """Bookable service definition."""

    __tablename__ = "booking_types"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    workspace_id = Column(String(26), ForeignKey("workspaces.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(Integer, nullable=False)  # minutes
    location = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, onupdate=func.now())

    workspace = relationship("Workspace", back_populates="booking_types")
    availability_rules = relationship(
        "AvailabilityRule",
        back_populates="booking_type",
        cascade="all, delete-orphan",
        order_by=lambda: [AvailabilityRule.day_of_week, AvailabilityRule.start_time],
    )

    __table_args__ = (CheckConstraint("duration > 0", name="check_booking_type_duration_positive"),)

    def __repr__(self) -> str:
        return f"<BookingType {self.id}: {self.name} ({self.duration}m)>"


class AvailabilityRule(Base):
    """Recurring weekly window during which a booking type accepts reservations."""

    __tablename__ = "availability_rules"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    booking_type_id = Column(
        String(26), ForeignKey("booking_types.id", ondelete="CASCADE"), nullable=False, index=True
    )

    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(String(5), nullable=False)  # local "HH:MM"
    end_time = Column(String(5), nullable=False)

    created_at = Column(UTCDateTime, server_default=func.now())

    booking_type = relationship("BookingType", back_populates="availability_rules")

    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_availability_rules_day"),
        CheckConstraint("start_time < end_time", name="ck_availability_rules_window"),
    )

    def __repr__(self) -> str:
        return (
            f"<AvailabilityRule {self.id}: day={self.day_of_week} "
            f"{self.start_time}-{self.end_time}>"
        )
