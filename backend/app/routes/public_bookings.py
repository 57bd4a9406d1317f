# backend/app/routes/public_bookings.py
"""
Public booking page routes (no authentication).

Router Endpoints:
    GET /{workspace_id}/types - Active booking types
    GET /{workspace_id}/availability - Free slots of a booking type on a date
    GET /{workspace_id}/available-dates - Dates with availability rules
    POST /{workspace_id} - Book a slot
    GET /{workspace_id}/reference/{reference_code} - Look up a confirmation

A 409 from POST means the slot was taken after it was listed: re-fetch
availability and let the visitor pick again.
"""

import asyncio
from datetime import date
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..api.dependencies import (
    get_availability_service,
    get_booking_type_service,
    get_public_booking_service,
)
from ..core.exceptions import DomainException
from ..schemas.booking import SlotResponse
from ..schemas.booking_type import AvailableDateResponse, PublicBookingTypeResponse
from ..schemas.public_booking import BookingConfirmation, PublicBookingCreate
from ..services.availability_service import AvailabilityService
from ..services.booking_type_service import BookingTypeService
from ..services.public_booking_service import PublicBookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["public-bookings"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("/{workspace_id}/types", response_model=List[PublicBookingTypeResponse])
async def list_public_booking_types(
    workspace_id: str,
    service: BookingTypeService = Depends(get_booking_type_service),
) -> List[PublicBookingTypeResponse]:
    try:
        booking_types = await asyncio.to_thread(service.list_public_booking_types, workspace_id)
        return [PublicBookingTypeResponse.model_validate(bt) for bt in booking_types]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{workspace_id}/availability", response_model=List[SlotResponse])
async def get_available_slots(
    workspace_id: str,
    booking_type_id: str = Query(..., alias="bookingTypeId"),
    day: date = Query(..., alias="date", description="Workspace-local date, YYYY-MM-DD"),
    service: AvailabilityService = Depends(get_availability_service),
) -> List[SlotResponse]:
    """Free slots for a booking type on a date, ordered by start."""
    try:
        slots = await asyncio.to_thread(
            service.get_available_slots, workspace_id, booking_type_id, day
        )
        return [
            SlotResponse(start_time=slot.start, end_time=slot.end, duration=slot.duration)
            for slot in slots
        ]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{workspace_id}/available-dates", response_model=List[AvailableDateResponse])
async def get_available_dates(
    workspace_id: str,
    booking_type_id: str = Query(..., alias="bookingTypeId"),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    service: AvailabilityService = Depends(get_availability_service),
) -> List[AvailableDateResponse]:
    try:
        dates = await asyncio.to_thread(
            service.get_available_dates, workspace_id, booking_type_id, from_date
        )
        return [
            AvailableDateResponse(date=item["date"].isoformat(), day_of_week=item["day_of_week"])
            for item in dates
        ]
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{workspace_id}",
    response_model=BookingConfirmation,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Slot no longer available"}},
)
async def create_public_booking(
    workspace_id: str,
    payload: PublicBookingCreate,
    service: PublicBookingService = Depends(get_public_booking_service),
) -> BookingConfirmation:
    """Book a slot; returns the confirmation with its reference code."""
    try:
        return await asyncio.to_thread(service.submit, workspace_id, payload)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{workspace_id}/reference/{reference_code}", response_model=BookingConfirmation)
async def get_booking_by_reference(
    workspace_id: str,
    reference_code: str,
    service: PublicBookingService = Depends(get_public_booking_service),
) -> BookingConfirmation:
    try:
        return await asyncio.to_thread(service.get_by_reference, workspace_id, reference_code)
    except DomainException as e:
        handle_domain_exception(e)
