# backend/app/routes/booking_types.py
"""
Booking type routes for the staff dashboard.

Router Endpoints:
    GET / - List booking types of the caller's workspace
    POST / - Create a booking type with default availability (owner)
    GET /{booking_type_id} - Booking type with its rules
    PATCH /{booking_type_id} - Update a booking type (owner)
    DELETE /{booking_type_id} - Delete or retire a booking type (owner)
    POST /{booking_type_id}/availability - Add an availability rule (owner)
    DELETE /{booking_type_id}/availability/{rule_id} - Remove a rule (owner)
"""

import asyncio
import logging
from typing import List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ..api.dependencies import (
    StaffPrincipal,
    get_booking_type_service,
    get_current_staff,
    require_owner,
)
from ..core.exceptions import DomainException
from ..schemas.booking_type import (
    AvailabilityRuleCreate,
    AvailabilityRuleResponse,
    BookingTypeCreate,
    BookingTypeResponse,
    BookingTypeUpdate,
)
from ..services.booking_type_service import BookingTypeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/types", tags=["booking-types"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("", response_model=List[BookingTypeResponse])
async def list_booking_types(
    include_inactive: bool = Query(False, alias="includeInactive"),
    principal: StaffPrincipal = Depends(get_current_staff),
    service: BookingTypeService = Depends(get_booking_type_service),
) -> List[BookingTypeResponse]:
    """List booking types of the workspace, active only unless asked otherwise."""
    try:
        booking_types = await asyncio.to_thread(
            service.list_booking_types, principal.workspace_id, include_inactive
        )
        return [BookingTypeResponse.model_validate(bt) for bt in booking_types]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=BookingTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_type(
    payload: BookingTypeCreate,
    principal: StaffPrincipal = Depends(require_owner),
    service: BookingTypeService = Depends(get_booking_type_service),
) -> BookingTypeResponse:
    """Create a booking type; availability defaults to the workspace week."""
    try:
        booking_type = await asyncio.to_thread(
            service.create_booking_type, principal.workspace_id, payload
        )
        return BookingTypeResponse.model_validate(booking_type)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{booking_type_id}", response_model=BookingTypeResponse)
async def get_booking_type(
    booking_type_id: str,
    principal: StaffPrincipal = Depends(get_current_staff),
    service: BookingTypeService = Depends(get_booking_type_service),
) -> BookingTypeResponse:
    try:
        booking_type = await asyncio.to_thread(
            service.get_booking_type, principal.workspace_id, booking_type_id
        )
        return BookingTypeResponse.model_validate(booking_type)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{booking_type_id}", response_model=BookingTypeResponse)
async def update_booking_type(
    booking_type_id: str,
    payload: BookingTypeUpdate,
    principal: StaffPrincipal = Depends(require_owner),
    service: BookingTypeService = Depends(get_booking_type_service),
) -> BookingTypeResponse:
    try:
        booking_type = await asyncio.to_thread(
            service.update_booking_type, principal.workspace_id, booking_type_id, payload
        )
        return BookingTypeResponse.model_validate(booking_type)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{booking_type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking_type(
    booking_type_id: str,
    principal: StaffPrincipal = Depends(require_owner),
    service: BookingTypeService = Depends(get_booking_type_service),
) -> Response:
    """
    Delete a booking type.

    409 while PENDING or CONFIRMED bookings exist. Types with booking history
    are deactivated instead of deleted.
    """
    try:
        await asyncio.to_thread(service.delete_booking_type, principal.workspace_id, booking_type_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{booking_type_id}/availability",
    response_model=AvailabilityRuleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_availability_rule(
    booking_type_id: str,
    payload: AvailabilityRuleCreate,
    principal: StaffPrincipal = Depends(require_owner),
    service: BookingTypeService = Depends(get_booking_type_service),
) -> AvailabilityRuleResponse:
    """Add a weekly window (0 = Sunday, local HH:MM)."""
    try:
        rule = await asyncio.to_thread(
            service.add_availability_rule, principal.workspace_id, booking_type_id, payload
        )
        return AvailabilityRuleResponse.model_validate(rule)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete(
    "/{booking_type_id}/availability/{rule_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_availability_rule(
    booking_type_id: str,
    rule_id: str,
    principal: StaffPrincipal = Depends(require_owner),
    service: BookingTypeService = Depends(get_booking_type_service),
) -> Response:
    try:
        await asyncio.to_thread(
            service.delete_availability_rule, principal.workspace_id, booking_type_id, rule_id
        )
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)
