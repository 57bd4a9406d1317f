# backend/app/repositories/booking_type_repository.py
"""
Booking type catalog.

Holds booking type metadata (duration, active flag, location). Also provides
the row lock that serializes reservation commits for one booking type.
"""

import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.booking_type import BookingType
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingTypeRepository(BaseRepository[BookingType]):
    """Data access for booking types."""

    def __init__(self, db: Session):
        super().__init__(db, BookingType)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(BookingType.availability_rules))

    def get_for_workspace(
        self, workspace_id: str, booking_type_id: str, *, active_only: bool = False
    ) -> Optional[BookingType]:
        """Return the booking type only if it belongs to the workspace."""
        try:
            query = self._apply_eager_loading(
                self.db.query(BookingType).filter(
                    BookingType.id == booking_type_id,
                    BookingType.workspace_id == workspace_id,
                )
            )
            if active_only:
                query = query.filter(BookingType.is_active.is_(True))
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting booking type {booking_type_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve booking type: {str(e)}")

    def list_for_workspace(self, workspace_id: str, *, active_only: bool = False) -> List[BookingType]:
        query = self._apply_eager_loading(
            self.db.query(BookingType).filter(BookingType.workspace_id == workspace_id)
        )
        if active_only:
            query = query.filter(BookingType.is_active.is_(True))
        return self._execute_query(query.order_by(BookingType.name.asc(), BookingType.id.asc()))

    def lock_for_update(self, booking_type_id: str) -> Optional[BookingType]:
        """
        Load a booking type holding a row lock until the transaction ends.

        PostgreSQL takes ``FOR UPDATE``. SQLite has no row locks, so a no-op
        UPDATE opens the write transaction and takes the database write lock
        before any booking is re-read; concurrent writers wait on it.
        """
        try:
            query = self.db.query(BookingType).filter(BookingType.id == booking_type_id)
            if self.dialect_name == "postgresql":
                query = query.with_for_update()
            else:
                self.db.execute(
                    update(BookingType)
                    .where(BookingType.id == booking_type_id)
                    .values(updated_at=BookingType.updated_at)
                    .execution_options(synchronize_session=False)
                )
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking booking type {booking_type_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock booking type: {str(e)}")
