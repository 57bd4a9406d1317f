# backend/app/services/reservation_service.py
"""
Reservation Service

Commits a booking for one slot exactly once, even under concurrent requests.

The requested start is re-derived against the booking type's rules (it must be
a slot the generator yields for its local date), then checked and inserted in
a single transaction:

1. lock the booking type row (PostgreSQL ``FOR UPDATE``)
2. re-read active bookings overlapping the interval
3. insert with a fresh reference code and commit

Storage constraints back the check: the partial unique index on
(booking_type_id, start_time) for active bookings, and on PostgreSQL an
exclusion constraint over the active intervals. An integrity error on the
reference code retries the whole attempt; any other integrity error is a slot
conflict and is never retried onto a different slot.
"""

from datetime import datetime, timedelta
import logging
import secrets
import string
from typing import Any, Dict, Optional, Tuple

import pytz
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    DomainException,
    InvalidTransitionException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    SlotConflictException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc, get_timezone, to_local, utc_now
from ..events import BookingCreated, BookingRescheduled, EventPublisher
from ..models.booking import Booking, BookingStatus
from ..models.booking_type import BookingType
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from ..repositories.booking_type_repository import BookingTypeRepository
from ..repositories.contact_repository import ContactRepository
from ..repositories.event_outbox_repository import EventOutboxRepository
from .availability_service import AvailabilityService
from .base import BaseService
from .conflict_filter import find_conflicts
from .slot_generator import is_generated_start

logger = logging.getLogger(__name__)

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits

RESCHEDULABLE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


def generate_reference_code(length: Optional[int] = None) -> str:
    """Random human-facing code from A-Z0-9."""
    size = length or settings.reference_code_length
    return "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(size))


def is_reference_collision(exc: IntegrityError) -> bool:
    """Whether an integrity error came from the per-workspace reference code constraint."""
    message = str(getattr(exc, "orig", exc))
    return "reference_code" in message or "uq_bookings_workspace_reference" in message


def normalize_requested_start(requested_start: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """A start without an offset is wall-clock time in the workspace timezone."""
    if requested_start.tzinfo is None:
        return tz.localize(requested_start).astimezone(pytz.UTC)
    return ensure_utc(requested_start)


class ReservationService(BaseService):
    """Validates and commits reservations and reschedules."""

    def __init__(
        self,
        db: Session,
        availability_service: Optional[AvailabilityService] = None,
        booking_repository: Optional[BookingRepository] = None,
        booking_type_repository: Optional[BookingTypeRepository] = None,
        contact_repository: Optional[ContactRepository] = None,
        event_publisher: Optional[EventPublisher] = None,
    ):
        super().__init__(db)
        self.booking_repository = booking_repository or BookingRepository(db)
        self.booking_type_repository = booking_type_repository or BookingTypeRepository(db)
        self.contact_repository = contact_repository or ContactRepository(db)
        self.availability_service = availability_service or AvailabilityService(
            db,
            booking_type_repository=self.booking_type_repository,
            booking_repository=self.booking_repository,
        )
        self.event_publisher = event_publisher or EventPublisher(EventOutboxRepository(db))

    # Validation

    def _validated_interval(
        self, booking_type: BookingType, requested_start: datetime, tz: pytz.BaseTzInfo
    ) -> Tuple[datetime, datetime]:
        """
        Check that the start is a generated slot and compute the end.

        Raises:
            ValidationException: The start is not a slot of the booking type
        """
        start = normalize_requested_start(requested_start, tz)
        local_day = to_local(start, tz).date()
        if not is_generated_start(
            booking_type.duration, local_day, booking_type.availability_rules, tz, start
        ):
            raise ValidationException(
                "Requested start time is not an available slot for this booking type",
                details={"field": "startTime", "value": start.isoformat()},
            )
        return start, start + timedelta(minutes=booking_type.duration)

    def _unique_reference_code(self, workspace_id: str) -> str:
        for _ in range(settings.reservation_max_attempts):
            code = generate_reference_code()
            if not self.booking_repository.reference_code_exists(workspace_id, code):
                return code
        raise ServiceException("Could not allocate a unique reference code")

    def _ensure_slot_free(
        self,
        booking_type_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        """Lock the booking type and re-read overlapping active bookings."""
        locked = self.booking_type_repository.lock_for_update(booking_type_id)
        if locked is None or not locked.is_active:
            raise ValidationException(
                "Booking type not found or inactive",
                details={"field": "bookingTypeId", "value": booking_type_id},
            )

        overlapping = self.booking_repository.get_active_overlapping(
            booking_type_id, start, end, exclude_booking_id=exclude_booking_id
        )
        conflicts = find_conflicts(start, end, overlapping, exclude_booking_id=exclude_booking_id)
        if conflicts:
            raise SlotConflictException(
                details={"start_time": start.isoformat(), "end_time": end.isoformat()}
            )

    # Reservation

    @BaseService.measure_operation("reserve")
    def reserve(
        self,
        workspace_id: str,
        booking_type_id: str,
        contact_id: str,
        requested_start: datetime,
        notes: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Booking:
        """
        Reserve one slot of a booking type for a contact.

        Args:
            workspace_id: Owning workspace
            booking_type_id: Booking type to reserve
            contact_id: Contact the booking is for (same workspace)
            requested_start: Slot start; naive values are workspace-local
            notes: Optional free text
            metadata: Optional JSON stored with the booking

        Returns:
            The committed booking (PENDING, or CONFIRMED under auto-confirm)

        Raises:
            NotFoundException: Unknown workspace
            ValidationException: Bad booking type, contact or start time
            SlotConflictException: The interval was taken before commit
        """
        workspace, booking_type = self.availability_service.resolve_bookable_type(
            workspace_id, booking_type_id
        )
        if self.contact_repository.find_one_by(id=contact_id, workspace_id=workspace_id) is None:
            raise ValidationException("Contact not found", details={"field": "contactId"})

        tz = get_timezone(workspace.timezone)
        start, end = self._validated_interval(booking_type, requested_start, tz)

        values: Dict[str, Any] = {
            "workspace_id": workspace_id,
            "booking_type_id": booking_type.id,
            "contact_id": contact_id,
            "start_time": start,
            "end_time": end,
            "notes": notes,
            "booking_metadata": dict(metadata or {}),
        }
        if workspace.auto_confirm_bookings:
            values["status"] = BookingStatus.CONFIRMED.value
            values["confirmed_at"] = utc_now()
        else:
            values["status"] = BookingStatus.PENDING.value

        booking = self._commit_reservation(workspace_id, values)
        prometheus_metrics.record_reservation("created")

        self.log_operation(
            "reserve",
            booking_id=booking.id,
            booking_type_id=booking.booking_type_id,
            reference_code=booking.reference_code,
        )
        self.event_publisher.publish_detached(
            BookingCreated(
                booking_id=booking.id,
                workspace_id=workspace_id,
                booking_type_id=booking.booking_type_id,
                contact_id=contact_id,
                reference_code=booking.reference_code,
                status=booking.status,
                start_time=booking.start_time,
                end_time=booking.end_time,
            )
        )
        return booking

    def _commit_reservation(self, workspace_id: str, values: Dict[str, Any]) -> Booking:
        """Run the locked check-and-insert, retrying only on reference code collisions."""
        max_attempts = settings.reservation_max_attempts
        for attempt in range(1, max_attempts + 1):
            try:
                self._ensure_slot_free(values["booking_type_id"], values["start_time"], values["end_time"])
                booking = self.booking_repository.create(
                    reference_code=self._unique_reference_code(workspace_id), **values
                )
                self.db.commit()
                return booking
            except IntegrityError as exc:
                self.db.rollback()
                if is_reference_collision(exc):
                    self.logger.info(
                        "Reference code collision on attempt %d/%d, retrying", attempt, max_attempts
                    )
                    continue
                self.logger.info(
                    "Slot conflict for booking type %s at %s",
                    values["booking_type_id"],
                    values["start_time"],
                )
                prometheus_metrics.record_reservation("conflict")
                raise SlotConflictException(
                    details={"start_time": values["start_time"].isoformat()}
                ) from exc
            except SlotConflictException:
                self.db.rollback()
                self.logger.info(
                    "Slot already taken for booking type %s at %s",
                    values["booking_type_id"],
                    values["start_time"],
                )
                prometheus_metrics.record_reservation("conflict")
                raise
            except DomainException:
                self.db.rollback()
                raise
            except (SQLAlchemyError, RepositoryException) as exc:
                self.db.rollback()
                self.logger.error(f"Reservation commit failed: {str(exc)}")
                raise ServiceException("Database operation failed") from exc

        raise ServiceException("Could not allocate a unique reference code")

    # Reschedule

    @BaseService.measure_operation("reschedule")
    def reschedule(self, workspace_id: str, booking_id: str, new_start: datetime) -> Booking:
        """
        Move a PENDING or CONFIRMED booking to another slot of its booking type.

        The end is recomputed from the type's current duration and the booking
        itself is ignored when checking for conflicts.

        Raises:
            NotFoundException: Unknown booking
            InvalidTransitionException: Booking is no longer open
            ValidationException: New start is not a slot
            SlotConflictException: New interval is taken
        """
        booking = self.booking_repository.get_for_workspace(workspace_id, booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")
        if booking.status not in RESCHEDULABLE_STATUSES:
            raise InvalidTransitionException(
                booking.status,
                "RESCHEDULED",
                message=f"Cannot reschedule a {booking.status} booking",
            )

        workspace, booking_type = self.availability_service.resolve_bookable_type(
            workspace_id, booking.booking_type_id
        )
        tz = get_timezone(workspace.timezone)
        start, end = self._validated_interval(booking_type, new_start, tz)
        previous_start = booking.start_time

        try:
            self._ensure_slot_free(booking_type.id, start, end, exclude_booking_id=booking.id)
            updated = self.booking_repository.update_if_status(
                booking.id,
                RESCHEDULABLE_STATUSES,
                {"start_time": start, "end_time": end, "updated_at": utc_now()},
            )
            if not updated:
                raise InvalidTransitionException(
                    booking.status,
                    "RESCHEDULED",
                    message="Booking status changed while rescheduling",
                )
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            prometheus_metrics.record_reservation("conflict")
            raise SlotConflictException(details={"start_time": start.isoformat()}) from exc
        except SlotConflictException:
            self.db.rollback()
            prometheus_metrics.record_reservation("conflict")
            raise
        except DomainException:
            self.db.rollback()
            raise
        except (SQLAlchemyError, RepositoryException) as exc:
            self.db.rollback()
            self.logger.error(f"Reschedule commit failed: {str(exc)}")
            raise ServiceException("Database operation failed") from exc

        self.booking_repository.refresh(booking)
        self.log_operation("reschedule", booking_id=booking.id, start_time=start.isoformat())
        self.event_publisher.publish_detached(
            BookingRescheduled(
                booking_id=booking.id,
                workspace_id=workspace_id,
                previous_start_time=previous_start,
                start_time=booking.start_time,
                end_time=booking.end_time,
            )
        )
        return booking
