# backend/app/models/event_outbox.py
"""
Event outbox persistence model.

Booking events are written here and delivered to subscribers by the
dispatcher, decoupling notification and automation from the request path.
"""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Column, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import JSONType, UTCDateTime


class EventOutboxStatus(str, Enum):
    """Lifecycle states for an outbox event."""

    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class EventOutbox(Base):
    """Outbox entry pending delivery."""

    __tablename__ = "event_outbox"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    event_type = Column(String(100), nullable=False, index=True)
    aggregate_id = Column(String(64), nullable=False, index=True)
    idempotency_key = Column(String(255), nullable=False)
    payload = Column(JSONType, nullable=False, default=dict)
    status = Column(String(20), nullable=False, default=EventOutboxStatus.PENDING.value, index=True)
    attempt_count = Column(Integer, nullable=False, default=0)
    next_attempt_at = Column(UTCDateTime, nullable=True, index=True)
    last_error = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, server_default=func.now())
    updated_at = Column(UTCDateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("idempotency_key", name="uq_event_outbox_idempotency_key"),)

    def __repr__(self) -> str:
        return f"<EventOutbox {self.id}: {self.event_type} {self.status} attempts={self.attempt_count}>"
