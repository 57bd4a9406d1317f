# backend/app/services/public_booking_service.py
"""
Public Booking Gateway

Entry point for the unauthenticated booking page. Resolves the visitor to a
contact of the workspace, hands interval validation and the commit to the
reservation service, and returns a confirmation without internal ids.

Contact resolution rules:
- with an email: reuse the workspace contact with that (lower-cased) email,
  or create it; non-empty incoming first name, last name and phone replace
  the stored values, empty ones keep them
- without an email: always a new contact (phone numbers are not deduplicated)

Staff entering a booking from the dashboard go through the same contact
resolution, or name an existing contact directly.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, RepositoryException, ValidationException
from ..models.booking import Booking
from ..models.contact import Contact
from ..repositories.booking_repository import BookingRepository
from ..repositories.contact_repository import ContactRepository
from ..repositories.workspace_repository import WorkspaceRepository
from ..schemas.booking import StaffBookingCreate
from ..schemas.public_booking import (
    BookingConfirmation,
    ConfirmationBookingType,
    ConfirmationContact,
    PublicBookingCreate,
)
from .base import BaseService
from .reservation_service import ReservationService

logger = logging.getLogger(__name__)

PUBLIC_BOOKING_SOURCE = "public_booking_form"
PUBLIC_BOOKING_TAG = "public_booking"
STAFF_BOOKING_SOURCE = "staff_booking"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def build_confirmation(booking: Booking) -> BookingConfirmation:
    """Receipt payload for a booking."""
    booking_type = booking.booking_type
    contact = booking.contact
    return BookingConfirmation(
        reference_code=booking.reference_code,
        status=booking.status,
        start_time=booking.start_time,
        end_time=booking.end_time,
        booking_type=ConfirmationBookingType(
            name=booking_type.name,
            duration=booking_type.duration,
            location=booking_type.location,
        ),
        contact=ConfirmationContact(name=contact.display_name, email=contact.email),
        created_at=booking.created_at,
    )


class PublicBookingService(BaseService):
    """Public booking page gateway."""

    def __init__(
        self,
        db: Session,
        reservation_service: Optional[ReservationService] = None,
        contact_repository: Optional[ContactRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
        workspace_repository: Optional[WorkspaceRepository] = None,
    ):
        super().__init__(db)
        self.contact_repository = contact_repository or ContactRepository(db)
        self.booking_repository = booking_repository or BookingRepository(db)
        self.workspace_repository = workspace_repository or WorkspaceRepository(db)
        self.reservation_service = reservation_service or ReservationService(
            db,
            booking_repository=self.booking_repository,
            contact_repository=self.contact_repository,
        )

    # Contacts

    @staticmethod
    def _apply_contact_details(
        contact: Contact,
        first_name: Optional[str],
        last_name: Optional[str],
        phone: Optional[str],
    ) -> None:
        if first_name:
            contact.first_name = first_name
        if last_name:
            contact.last_name = last_name
        if phone:
            contact.phone = phone

    @BaseService.measure_operation("find_or_create_contact")
    def find_or_create_contact(
        self,
        workspace_id: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone: Optional[str] = None,
        source: str = PUBLIC_BOOKING_SOURCE,
    ) -> Contact:
        """
        Resolve the visitor to a workspace contact, committing any change.

        Raises:
            ValidationException: Neither email nor phone given
        """
        email = _clean(email)
        email = email.lower() if email else None
        first_name, last_name, phone = _clean(first_name), _clean(last_name), _clean(phone)
        if not email and not phone:
            raise ValidationException(
                "Either email or phone is required", details={"field": "email"}
            )

        if email:
            existing = self.contact_repository.find_by_email(workspace_id, email)
            if existing is not None:
                with self.transaction():
                    self._apply_contact_details(existing, first_name, last_name, phone)
                return existing

        try:
            with self.transaction():
                contact = self.contact_repository.create(
                    workspace_id=workspace_id,
                    email=email,
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone,
                    tags=[],
                    custom_fields={"source": source},
                )
            return contact
        except RepositoryException as exc:
            if not (email and isinstance(exc.__cause__, IntegrityError)):
                raise
            # A concurrent request created the same email first
            winner = self.contact_repository.find_by_email(workspace_id, email)
            if winner is None:
                raise
            self.logger.info("Reusing contact created concurrently for workspace %s", workspace_id)
            with self.transaction():
                self._apply_contact_details(winner, first_name, last_name, phone)
            return winner

    def _record_public_booking(self, contact: Contact) -> None:
        """Tag the contact and bump its booking counter."""
        tags = list(contact.tags or [])
        if PUBLIC_BOOKING_TAG not in tags:
            tags.append(PUBLIC_BOOKING_TAG)
        custom_fields: Dict[str, Any] = dict(contact.custom_fields or {})
        custom_fields["source"] = PUBLIC_BOOKING_SOURCE
        custom_fields["booking_count"] = int(custom_fields.get("booking_count") or 0) + 1

        try:
            contact.tags = tags
            contact.custom_fields = custom_fields
            self.db.commit()
        except SQLAlchemyError as exc:
            # The booking is already committed
            self.db.rollback()
            self.logger.warning(f"Failed to update contact {contact.id} after booking: {str(exc)}")

    # Bookings

    @BaseService.measure_operation("submit_public_booking")
    def submit(self, workspace_id: str, data: PublicBookingCreate) -> BookingConfirmation:
        """
        Book a slot from the public page.

        Raises:
            NotFoundException: Unknown workspace
            ValidationException: Bad booking type, start time or contact details
            SlotConflictException: Slot taken; the client should re-fetch availability
        """
        # Reject unknown workspaces and booking types before touching contacts
        self.reservation_service.availability_service.resolve_bookable_type(
            workspace_id, data.booking_type_id
        )

        contact = self.find_or_create_contact(
            workspace_id,
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
        )

        booking = self.reservation_service.reserve(
            workspace_id=workspace_id,
            booking_type_id=data.booking_type_id,
            contact_id=contact.id,
            requested_start=data.start_time,
            notes=_clean(data.notes),
            metadata={
                "source": PUBLIC_BOOKING_SOURCE,
                "customer_info": {
                    "first_name": _clean(data.first_name),
                    "last_name": _clean(data.last_name),
                    "email": contact.email,
                    "phone": _clean(data.phone),
                },
            },
        )
        self._record_public_booking(contact)

        self.log_operation(
            "submit_public_booking",
            workspace_id=workspace_id,
            reference_code=booking.reference_code,
        )
        return build_confirmation(booking)

    @BaseService.measure_operation("create_staff_booking")
    def create_staff_booking(
        self, workspace_id: str, data: StaffBookingCreate, created_by: str
    ) -> Booking:
        """
        Book a slot on behalf of a contact from the dashboard.

        Raises:
            NotFoundException: Unknown workspace
            ValidationException: Bad booking type, contact or start time
            SlotConflictException: Slot taken
        """
        self.reservation_service.availability_service.resolve_bookable_type(
            workspace_id, data.booking_type_id
        )

        if data.contact_id:
            contact_id = data.contact_id
        else:
            contact_id = self.find_or_create_contact(
                workspace_id,
                email=data.email,
                first_name=data.first_name,
                last_name=data.last_name,
                phone=data.phone,
                source=STAFF_BOOKING_SOURCE,
            ).id

        booking = self.reservation_service.reserve(
            workspace_id=workspace_id,
            booking_type_id=data.booking_type_id,
            contact_id=contact_id,
            requested_start=data.start_time,
            notes=_clean(data.notes),
            metadata={"source": STAFF_BOOKING_SOURCE, "created_by": created_by},
        )

        self.log_operation(
            "create_staff_booking",
            workspace_id=workspace_id,
            reference_code=booking.reference_code,
            created_by=created_by,
        )
        return booking

    @BaseService.measure_operation("get_booking_by_reference")
    def get_by_reference(self, workspace_id: str, reference_code: str) -> BookingConfirmation:
        if self.workspace_repository.get_active(workspace_id) is None:
            raise NotFoundException("Workspace not found")
        booking = self.booking_repository.get_by_reference(workspace_id, reference_code)
        if booking is None:
            raise NotFoundException("Booking not found")
        return build_confirmation(booking)
