# backend/app/repositories/__init__.py
"""
Repository layer for the booking engine.

Key Components:
- BaseRepository: generic CRUD foundation
- AvailabilityRuleRepository: weekly availability windows per booking type
- BookingTypeRepository: booking type catalog and commit lock
- BookingRepository: committed bookings and range queries
- ContactRepository / WorkspaceRepository: identity lookups
- EventOutboxRepository: pending booking events
"""

from .availability_rule_repository import AvailabilityRuleRepository
from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .booking_type_repository import BookingTypeRepository
from .contact_repository import ContactRepository
from .event_outbox_repository import EventOutboxRepository
from .workspace_repository import WorkspaceRepository

__all__ = [
    "AvailabilityRuleRepository",
    "BaseRepository",
    "BookingRepository",
    "BookingTypeRepository",
    "ContactRepository",
    "EventOutboxRepository",
    "IRepository",
    "WorkspaceRepository",
]
