# backend/app/repositories/base_repository.py
"""
Generic data access for booking engine tables.

Repositories flush but never commit; the owning service decides when a
reservation, rule change or status update becomes durable. Storage errors
surface as RepositoryException.

The stores the scheduling core depends on (availability rules, booking
types, bookings) are repositories built on this class and injected into the
services, so no service talks to a global client.
"""

from abc import ABC, abstractmethod
import logging
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class IRepository(ABC, Generic[T]):
    """Lookup, insert and delete by ULID primary key."""

    @abstractmethod
    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[T]:
        """Row by id; subclasses decide which relationships load eagerly."""

    @abstractmethod
    def create(self, **kwargs) -> T:
        """Add and flush a row so its generated id is available."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """False when no row has the id."""


class BaseRepository(IRepository[T]):
    """Session-bound repository for one model; the session belongs to the service."""

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @property
    def dialect_name(self) -> str:
        bind = self.db.get_bind()
        return bind.dialect.name if bind is not None else "sqlite"

    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[T]:
        """Row by id, eager-loading through ``_apply_eager_loading`` unless disabled."""
        try:
            query = self.db.query(self.model).filter(self.model.id == id)

            if load_relationships:
                query = self._apply_eager_loading(query)

            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}")

    def create(self, **kwargs) -> T:
        """Insert and flush; the caller commits."""
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()  # Get ID without committing
            return entity
        except IntegrityError as exc:
            self.logger.warning("Integrity error creating %s: %s", self.model.__name__, exc)
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}") from e

    def delete(self, id: str) -> bool:
        """
        Delete and flush.

        Rows still referenced (a booking type with bookings) raise
        RepositoryException.
        """
        try:
            entity = self.get_by_id(id, load_relationships=False)
            if not entity:
                return False

            self.db.delete(entity)
            self.db.flush()
            return True
        except IntegrityError as e:
            self.logger.error(
                f"Cannot delete {self.model.__name__} {id} due to constraints: {str(e)}"
            )
            self.db.rollback()
            raise RepositoryException(f"Cannot delete due to existing references: {str(e)}")
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting {self.model.__name__} {id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to delete {self.model.__name__}: {str(e)}")

    def exists(self, **kwargs) -> bool:
        """Check if an entity exists with given criteria."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first() is not None
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking existence: {str(e)}")
            raise RepositoryException(f"Failed to check existence: {str(e)}")

    def find_one_by(self, **kwargs) -> Optional[T]:
        """Find the first entity matching exact-match criteria."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding one by criteria: {str(e)}")
            raise RepositoryException(f"Failed to find record: {str(e)}")

    # Protected helper methods for use by subclasses

    def _apply_eager_loading(self, query: Query) -> Query:
        """Booking and booking type repositories load their relationships here."""
        return query

    def _execute_query(self, query: Query) -> List[T]:
        """Execute query with error handling."""
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Query execution error: {str(e)}")
            raise RepositoryException(f"Query failed: {str(e)}")
