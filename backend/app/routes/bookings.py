# backend/app/routes/bookings.py
"""
Booking routes for the staff dashboard.

Router Endpoints:
    GET / - List bookings with filters, newest first
    POST / - Book a slot for a contact from the dashboard
    GET /upcoming - Open bookings in the coming days
    GET /today - Today's bookings in the workspace timezone
    GET /{booking_id} - Booking details
    PATCH /{booking_id}/status - Lifecycle transition
    POST /{booking_id}/reschedule - Move to another slot
    DELETE /{booking_id} - Cancel a booking

Static paths are declared before /{booking_id}.
"""

import asyncio
from datetime import date
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..api.dependencies import (
    StaffPrincipal,
    get_booking_service,
    get_current_staff,
    get_lifecycle_service,
    get_public_booking_service,
    get_reservation_service,
)
from ..core.exceptions import DomainException
from ..schemas.booking import (
    BookingReschedule,
    BookingResponse,
    BookingStatusUpdate,
    StaffBookingCreate,
)
from ..services.booking_lifecycle import BookingLifecycleService
from ..services.booking_service import BookingService
from ..services.public_booking_service import PublicBookingService
from ..services.reservation_service import ReservationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# 1. First: all specific routes


@router.get("", response_model=List[BookingResponse])
async def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    booking_type_id: Optional[str] = Query(None, alias="bookingTypeId"),
    principal: StaffPrincipal = Depends(get_current_staff),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    """List bookings of the workspace; dates are inclusive and workspace-local."""
    try:
        bookings = await asyncio.to_thread(
            booking_service.list_bookings,
            principal.workspace_id,
            status_filter,
            start_date,
            end_date,
            booking_type_id,
        )
        return [BookingResponse.from_booking(b) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: StaffBookingCreate,
    principal: StaffPrincipal = Depends(get_current_staff),
    gateway: PublicBookingService = Depends(get_public_booking_service),
) -> BookingResponse:
    """
    Book a slot for an existing or new contact.

    409 when the slot was taken; the dashboard should refresh availability.
    """
    try:
        booking = await asyncio.to_thread(
            gateway.create_staff_booking, principal.workspace_id, payload, principal.user_id
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/upcoming", response_model=List[BookingResponse])
async def get_upcoming_bookings(
    principal: StaffPrincipal = Depends(get_current_staff),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    """PENDING and CONFIRMED bookings starting in the upcoming window."""
    try:
        bookings = await asyncio.to_thread(
            booking_service.get_upcoming_bookings, principal.workspace_id
        )
        return [BookingResponse.from_booking(b) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/today", response_model=List[BookingResponse])
async def get_today_bookings(
    principal: StaffPrincipal = Depends(get_current_staff),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    try:
        bookings = await asyncio.to_thread(booking_service.get_today_bookings, principal.workspace_id)
        return [BookingResponse.from_booking(b) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


# 2. Then: dynamic routes


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    principal: StaffPrincipal = Depends(get_current_staff),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.get_booking, principal.workspace_id, booking_id
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    payload: BookingStatusUpdate,
    principal: StaffPrincipal = Depends(get_current_staff),
    lifecycle: BookingLifecycleService = Depends(get_lifecycle_service),
) -> BookingResponse:
    """
    Apply a lifecycle transition.

    409 when the transition is not allowed from the current status.
    """
    try:
        booking = await asyncio.to_thread(
            lifecycle.transition,
            principal.workspace_id,
            booking_id,
            payload.status,
            payload.reason,
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/reschedule", response_model=BookingResponse)
async def reschedule_booking(
    booking_id: str,
    payload: BookingReschedule,
    principal: StaffPrincipal = Depends(get_current_staff),
    reservation_service: ReservationService = Depends(get_reservation_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            reservation_service.reschedule,
            principal.workspace_id,
            booking_id,
            payload.start_time,
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{booking_id}", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str,
    reason: Optional[str] = Query(None, max_length=500),
    principal: StaffPrincipal = Depends(get_current_staff),
    lifecycle: BookingLifecycleService = Depends(get_lifecycle_service),
) -> BookingResponse:
    """Cancel a booking; its interval becomes free for new bookings."""
    try:
        booking = await asyncio.to_thread(
            lifecycle.cancel, principal.workspace_id, booking_id, reason
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)
