# backend/app/services/booking_lifecycle.py
"""
Booking lifecycle state machine.

PENDING -> CONFIRMED | CANCELLED | NO_SHOW
CONFIRMED -> COMPLETED | CANCELLED | NO_SHOW
COMPLETED, CANCELLED, NO_SHOW are terminal.

A cancelled or no-show booking is never reactivated; its interval becomes
reservable by a new booking instead. Concurrent transitions on one booking are
serialized with an UPDATE guarded on the current status, so the loser gets an
InvalidTransition error instead of overwriting the winner.
"""

import logging
from typing import Dict, FrozenSet, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import (
    InvalidTransitionException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..core.timezone_utils import utc_now
from ..events import BookingCancelled, BookingStatusChanged, EventPublisher
from ..models.booking import Booking, BookingStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from ..repositories.event_outbox_repository import EventOutboxRepository
from .base import BaseService

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}

# Timestamp column stamped when a booking enters the status
_TIMESTAMP_FIELDS = {
    BookingStatus.CONFIRMED: "confirmed_at",
    BookingStatus.COMPLETED: "completed_at",
    BookingStatus.CANCELLED: "cancelled_at",
}


def parse_status(value: Union[str, BookingStatus]) -> BookingStatus:
    """Coerce a status name into the closed enum."""
    if isinstance(value, BookingStatus):
        return value
    try:
        return BookingStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationException(
            f"Unknown booking status: {value}",
            details={"field": "status", "allowed": [s.value for s in BookingStatus]},
        )


def allowed_targets(current: Union[str, BookingStatus]) -> FrozenSet[BookingStatus]:
    return ALLOWED_TRANSITIONS[parse_status(current)]


def can_transition(current: Union[str, BookingStatus], target: Union[str, BookingStatus]) -> bool:
    """Whether the table allows ``current`` -> ``target`` (same-state is never allowed)."""
    return parse_status(target) in allowed_targets(current)


class BookingLifecycleService(BaseService):
    """Applies status transitions to committed bookings."""

    def __init__(
        self,
        db: Session,
        booking_repository: Optional[BookingRepository] = None,
        event_publisher: Optional[EventPublisher] = None,
    ):
        super().__init__(db)
        self.booking_repository = booking_repository or BookingRepository(db)
        self.event_publisher = event_publisher or EventPublisher(EventOutboxRepository(db))

    @BaseService.measure_operation("transition")
    def transition(
        self,
        workspace_id: str,
        booking_id: str,
        target: Union[str, BookingStatus],
        reason: Optional[str] = None,
    ) -> Booking:
        """
        Move a booking to ``target``.

        Args:
            workspace_id: Workspace the caller acts for
            booking_id: Booking to change
            target: Requested status
            reason: Stored as cancellation_reason when cancelling

        Returns:
            The updated booking

        Raises:
            ValidationException: Unknown status name
            NotFoundException: No such booking in the workspace
            InvalidTransitionException: Not allowed by the table, or a
                concurrent transition changed the status first
        """
        target_status = parse_status(target)

        booking = self.booking_repository.get_for_workspace(workspace_id, booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")

        current = parse_status(booking.status)
        allowed = ALLOWED_TRANSITIONS[current]
        if target_status not in allowed:
            prometheus_metrics.record_transition(target_status.value, "rejected")
            raise InvalidTransitionException(
                current.value, target_status.value, [s.value for s in allowed]
            )

        now = utc_now()
        values = {"status": target_status.value, "updated_at": now}
        timestamp_field = _TIMESTAMP_FIELDS.get(target_status)
        if timestamp_field:
            values[timestamp_field] = now
        if target_status == BookingStatus.CANCELLED:
            values["cancellation_reason"] = reason

        try:
            applied = self.booking_repository.update_if_status(booking.id, [current.value], values)
            if not applied:
                self.db.rollback()
                prometheus_metrics.record_transition(target_status.value, "rejected")
                # Another request moved the booking first; report against what it holds now
                self.booking_repository.refresh(booking)
                latest = parse_status(booking.status)
                raise InvalidTransitionException(
                    latest.value,
                    target_status.value,
                    [s.value for s in ALLOWED_TRANSITIONS[latest]],
                )
            self.db.commit()
        except (SQLAlchemyError, RepositoryException) as exc:
            self.db.rollback()
            self.logger.error(f"Status transition failed for {booking_id}: {str(exc)}")
            raise ServiceException("Database operation failed") from exc

        self.booking_repository.refresh(booking)
        prometheus_metrics.record_transition(target_status.value, "applied")
        self.log_operation(
            "transition",
            booking_id=booking.id,
            from_status=current.value,
            to_status=target_status.value,
        )

        self.event_publisher.publish_detached(
            BookingStatusChanged(
                booking_id=booking.id,
                workspace_id=workspace_id,
                from_status=current.value,
                to_status=target_status.value,
                changed_at=now,
            )
        )
        if target_status == BookingStatus.CANCELLED:
            self.event_publisher.publish_detached(
                BookingCancelled(
                    booking_id=booking.id,
                    workspace_id=workspace_id,
                    cancelled_at=now,
                    reason=reason,
                )
            )
        return booking

    def cancel(self, workspace_id: str, booking_id: str, reason: Optional[str] = None) -> Booking:
        return self.transition(workspace_id, booking_id, BookingStatus.CANCELLED, reason=reason)
