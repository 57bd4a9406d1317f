"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import StaffPrincipal, get_current_staff, require_owner
from .database import get_db
from .services import (
    get_availability_service,
    get_booking_service,
    get_booking_type_service,
    get_lifecycle_service,
    get_public_booking_service,
    get_reservation_service,
)

__all__ = [
    # Auth
    "StaffPrincipal",
    "get_current_staff",
    "require_owner",
    # Database
    "get_db",
    # Services
    "get_availability_service",
    "get_booking_service",
    "get_booking_type_service",
    "get_lifecycle_service",
    "get_public_booking_service",
    "get_reservation_service",
]
