# backend/app/repositories/booking_repository.py
"""
Booking Repository for the scheduling engine.

Holds committed bookings and exposes the range queries used by the conflict
filter, the staff listings and the lifecycle's conditional status update.
"""

from datetime import datetime
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.booking import ACTIVE_STATUSES, Booking, BookingStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_ACTIVE_VALUES = [s.value for s in ACTIVE_STATUSES]


class BookingRepository(BaseRepository[Booking]):
    """Data access for bookings."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Booking.booking_type), joinedload(Booking.contact))

    def create(self, **kwargs: Any) -> Booking:
        """Create a booking, exposing integrity errors for conflict handling."""
        try:
            return super().create(**kwargs)
        except RepositoryException as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise exc.__cause__
            raise

    # Lookups

    def get_for_workspace(self, workspace_id: str, booking_id: str) -> Optional[Booking]:
        query = self._apply_eager_loading(
            self.db.query(Booking).filter(
                Booking.id == booking_id,
                Booking.workspace_id == workspace_id,
            )
        )
        try:
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve booking: {str(e)}")

    def get_by_reference(self, workspace_id: str, reference_code: str) -> Optional[Booking]:
        query = self._apply_eager_loading(
            self.db.query(Booking).filter(
                Booking.workspace_id == workspace_id,
                Booking.reference_code == reference_code.strip().upper(),
            )
        )
        try:
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting booking by reference: {str(e)}")
            raise RepositoryException(f"Failed to retrieve booking: {str(e)}")

    def reference_code_exists(self, workspace_id: str, reference_code: str) -> bool:
        return self.exists(workspace_id=workspace_id, reference_code=reference_code)

    # Range queries

    def get_active_overlapping(
        self,
        booking_type_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Active bookings of a type whose interval overlaps [start, end).

        Args:
            booking_type_id: Booking type whose schedule is checked
            start: Range start (UTC)
            end: Range end (UTC)
            exclude_booking_id: Optional booking to ignore (reschedule)
        """
        query = self.db.query(Booking).filter(
            Booking.booking_type_id == booking_type_id,
            Booking.status.in_(_ACTIVE_VALUES),
            Booking.start_time < end,
            Booking.end_time > start,
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return self._execute_query(query.order_by(Booking.start_time.asc()))

    def list_for_workspace(
        self,
        workspace_id: str,
        *,
        status: Optional[str] = None,
        start_from: Optional[datetime] = None,
        start_before: Optional[datetime] = None,
        booking_type_id: Optional[str] = None,
        newest_first: bool = True,
        statuses: Optional[Iterable[str]] = None,
    ) -> List[Booking]:
        """
        Staff listing with optional filters.

        ``start_from`` is inclusive and ``start_before`` exclusive, both UTC.
        """
        query = self._apply_eager_loading(
            self.db.query(Booking).filter(Booking.workspace_id == workspace_id)
        )
        if status:
            query = query.filter(Booking.status == status)
        if statuses is not None:
            query = query.filter(Booking.status.in_(list(statuses)))
        if start_from is not None:
            query = query.filter(Booking.start_time >= start_from)
        if start_before is not None:
            query = query.filter(Booking.start_time < start_before)
        if booking_type_id:
            query = query.filter(Booking.booking_type_id == booking_type_id)

        order = Booking.start_time.desc() if newest_first else Booking.start_time.asc()
        return self._execute_query(query.order_by(order, Booking.id.asc()))

    def count_open_for_type(self, booking_type_id: str) -> int:
        """Bookings still awaiting their appointment (PENDING or CONFIRMED)."""
        try:
            return (
                self.db.query(Booking)
                .filter(
                    Booking.booking_type_id == booking_type_id,
                    Booking.status.in_(
                        [BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value]
                    ),
                )
                .count()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting bookings: {str(e)}")
            raise RepositoryException(f"Failed to count bookings: {str(e)}")

    # Conditional updates

    def update_if_status(
        self,
        booking_id: str,
        expected_statuses: Iterable[str],
        values: Dict[str, Any],
    ) -> bool:
        """
        Update a booking only while its status is one of ``expected_statuses``.

        Returns False when the precondition no longer holds (a concurrent
        writer got there first). Does NOT commit.
        """
        try:
            result = self.db.execute(
                update(Booking)
                .where(Booking.id == booking_id)
                .where(Booking.status.in_(list(expected_statuses)))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            self.db.flush()
            return bool(result.rowcount)
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to update booking: {str(e)}")

    def refresh(self, booking: Booking) -> None:
        self.db.refresh(booking)
