# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected. Every request gets
services bound to its own database session.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...events import EventPublisher
from ...repositories.booking_repository import BookingRepository
from ...repositories.booking_type_repository import BookingTypeRepository
from ...repositories.event_outbox_repository import EventOutboxRepository
from ...services.availability_service import AvailabilityService
from ...services.booking_lifecycle import BookingLifecycleService
from ...services.booking_service import BookingService
from ...services.booking_type_service import BookingTypeService
from ...services.public_booking_service import PublicBookingService
from ...services.reservation_service import ReservationService
from .database import get_db

logger = logging.getLogger(__name__)


def get_event_publisher(db: Session = Depends(get_db)) -> EventPublisher:
    return EventPublisher(EventOutboxRepository(db))


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_type_service(db: Session = Depends(get_db)) -> BookingTypeService:
    return BookingTypeService(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_reservation_service(
    db: Session = Depends(get_db),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> ReservationService:
    """
    Get reservation service with shared repositories.

    Args:
        db: Database session
        event_publisher: Outbox publisher for booking events

    Returns:
        ReservationService instance
    """
    booking_repository = BookingRepository(db)
    booking_type_repository = BookingTypeRepository(db)
    availability_service = AvailabilityService(
        db,
        booking_type_repository=booking_type_repository,
        booking_repository=booking_repository,
    )
    return ReservationService(
        db,
        availability_service=availability_service,
        booking_repository=booking_repository,
        booking_type_repository=booking_type_repository,
        event_publisher=event_publisher,
    )


def get_lifecycle_service(
    db: Session = Depends(get_db),
    event_publisher: EventPublisher = Depends(get_event_publisher),
) -> BookingLifecycleService:
    return BookingLifecycleService(db, event_publisher=event_publisher)


def get_public_booking_service(
    db: Session = Depends(get_db),
    reservation_service: ReservationService = Depends(get_reservation_service),
) -> PublicBookingService:
    return PublicBookingService(
        db,
        reservation_service=reservation_service,
        booking_repository=reservation_service.booking_repository,
        contact_repository=reservation_service.contact_repository,
    )
