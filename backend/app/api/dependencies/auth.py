# backend/app/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

Staff endpoints act for the workspace named in the bearer token; the role
claim separates owners (catalog management) from staff (booking handling).
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from jwt import PyJWTError

from ...auth import bearer_scheme, decode_access_token

logger = logging.getLogger(__name__)


class StaffRole(str, Enum):
    OWNER = "OWNER"
    STAFF = "STAFF"


@dataclass(frozen=True)
class StaffPrincipal:
    """Authenticated dashboard user."""

    user_id: str
    workspace_id: str
    role: StaffRole

    @property
    def is_owner(self) -> bool:
        return self.role == StaffRole.OWNER


async def get_current_staff(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> StaffPrincipal:
    """
    Resolve the bearer token into a staff principal.

    Raises:
        HTTPException: 401 when the token is missing or invalid, 403 when the
            role is not a workspace role
    """
    not_authenticated = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    invalid_credentials = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None or not credentials.credentials:
        raise not_authenticated

    try:
        payload = decode_access_token(credentials.credentials)
    except PyJWTError as e:
        logger.info(f"Rejected bearer token: {str(e)}")
        raise invalid_credentials

    user_id = payload.get("sub")
    workspace_id = payload.get("workspace_id")
    if not user_id or not workspace_id:
        raise invalid_credentials

    try:
        role = StaffRole(str(payload.get("role", "")).upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Workspace role required",
        )

    return StaffPrincipal(user_id=str(user_id), workspace_id=str(workspace_id), role=role)


async def require_owner(
    principal: StaffPrincipal = Depends(get_current_staff),
) -> StaffPrincipal:
    """Only workspace owners may change the booking catalog."""
    if not principal.is_owner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only workspace owners can perform this action",
        )
    return principal
