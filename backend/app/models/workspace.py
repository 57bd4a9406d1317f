# backend/app/models/workspace.py
"""
Workspace model.

A workspace is the tenant boundary: it owns booking types, contacts and
bookings, and fixes the single timezone all availability is expressed in.
"""

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import JSONType, UTCDateTime


class Workspace(Base):
    """Tenant owning all booking data."""

    __tablename__ = "workspaces"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    timezone = Column(String(64), nullable=False, default="UTC")
    contact_email = Column(String(255), nullable=True)

    # Booking policy
    auto_confirm_bookings = Column(Boolean, nullable=False, default=False)
    # Optional weekly windows seeded into new booking types:
    # [{"day_of_week": 1, "start_time": "09:00", "end_time": "17:00"}, ...]
    business_hours = Column(JSONType, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, onupdate=func.now())

    booking_types = relationship("BookingType", back_populates="workspace")

    def __repr__(self) -> str:
        return f"<Workspace {self.id}: {self.slug} ({self.timezone})>"
