"""
Bearer token handling.

Tokens are issued by the platform's auth service; the booking engine only
verifies them. Claims used:
- sub: user id
- workspace_id: workspace the user acts for
- role: OWNER or STAFF
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

from fastapi.security import HTTPBearer
import jwt

from .core.config import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a JWT access token.

    Raises:
        jwt.PyJWTError: Bad signature, expired or malformed token
    """
    payload_raw = jwt.decode(
        token,
        _secret_value(settings.secret_key),
        algorithms=[settings.algorithm],
        options={"verify_aud": False, "require": ["exp", "sub"]},
    )
    return cast(Dict[str, Any], payload_raw)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Used by tooling and tests; production tokens come from the auth service.

    Args:
        data: The claims to encode in the token
        expires_delta: Optional expiration time delta

    Returns:
        str: The encoded JWT token
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.access_token_expire_minutes
        )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, _secret_value(settings.secret_key), algorithm=settings.algorithm)
