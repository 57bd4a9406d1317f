# backend/app/repositories/workspace_repository.py
"""Repository for workspace lookups."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.workspace import Workspace
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class WorkspaceRepository(BaseRepository[Workspace]):
    """Read access to tenants; workspaces are managed outside the booking engine."""

    def __init__(self, db: Session):
        super().__init__(db, Workspace)

    def get_active(self, workspace_id: str) -> Optional[Workspace]:
        """Return the workspace if it exists and is active."""
        workspace = self.get_by_id(workspace_id, load_relationships=False)
        if workspace is None or not workspace.is_active:
            return None
        return workspace
