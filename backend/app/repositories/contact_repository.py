# backend/app/repositories/contact_repository.py
"""Repository for contact identity records."""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.contact import Contact
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ContactRepository(BaseRepository[Contact]):
    """Contacts are deduplicated per workspace by lower-cased email."""

    def __init__(self, db: Session):
        super().__init__(db, Contact)

    def find_by_email(self, workspace_id: str, email: str) -> Optional[Contact]:
        try:
            return (
                self.db.query(Contact)
                .filter(
                    Contact.workspace_id == workspace_id,
                    func.lower(Contact.email) == email.strip().lower(),
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding contact by email: {str(e)}")
            raise RepositoryException(f"Failed to find contact: {str(e)}")
