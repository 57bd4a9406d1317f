# backend/app/models/contact.py
"""
Contact model.

Contacts belong to the CRM side of the platform; the booking engine only
reads them and lazily creates them for public bookings. Within a workspace a
contact with an email is unique by that (lower-cased) email.
"""

from sqlalchemy import Column, ForeignKey, Index, String
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import JSONType, UTCDateTime


class Contact(Base):
    """Person who books appointments with a workspace."""

    __tablename__ = "contacts"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    workspace_id = Column(String(26), ForeignKey("workspaces.id"), nullable=False, index=True)

    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)

    tags = Column(JSONType, nullable=False, default=list)
    custom_fields = Column(JSONType, nullable=False, default=dict)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, onupdate=func.now())

    __table_args__ = (
        Index("uq_contacts_workspace_email", "workspace_id", "email", unique=True),
    )

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        if parts:
            return " ".join(parts)
        return self.email or self.phone or ""

    def __repr__(self) -> str:
        return f"<Contact {self.id}: {self.email or self.phone}>"
