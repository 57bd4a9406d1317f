"""Unit tests for bearer token verification and the staff principal."""

from datetime import timedelta

from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
import jwt
import pytest

from app.api.dependencies.auth import StaffPrincipal, StaffRole, get_current_staff, require_owner
from app.auth import create_access_token, decode_access_token


def credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestTokens:
    def test_round_trip_keeps_claims(self):
        token = create_access_token({"sub": "u1", "workspace_id": "w1", "role": "OWNER"})

        payload = decode_access_token(token)

        assert payload["sub"] == "u1"
        assert payload["workspace_id"] == "w1"
        assert "exp" in payload

    def test_expired_token_is_rejected(self):
        token = create_access_token({"sub": "u1"}, expires_delta=timedelta(seconds=-5))

        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_token_signed_with_other_key_is_rejected(self):
        token = jwt.encode({"sub": "u1", "exp": 9999999999}, "other-key", algorithm="HS256")

        with pytest.raises(jwt.InvalidSignatureError):
            decode_access_token(token)


class TestStaffPrincipal:
    @pytest.mark.asyncio
    async def test_resolves_owner(self):
        token = create_access_token({"sub": "u1", "workspace_id": "w1", "role": "owner"})

        principal = await get_current_staff(credentials(token))

        assert principal == StaffPrincipal(user_id="u1", workspace_id="w1", role=StaffRole.OWNER)
        assert principal.is_owner

    @pytest.mark.asyncio
    async def test_missing_credentials_is_401(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_staff(None)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_token_without_workspace_is_401(self):
        token = create_access_token({"sub": "u1", "role": "STAFF"})

        with pytest.raises(HTTPException) as exc_info:
            await get_current_staff(credentials(token))

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_staff_is_not_owner(self):
        principal = StaffPrincipal(user_id="u2", workspace_id="w1", role=StaffRole.STAFF)

        with pytest.raises(HTTPException) as exc_info:
            await require_owner(principal)

        assert exc_info.value.status_code == 403
