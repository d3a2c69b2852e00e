"""
Unit Tests for Security Module
Tests for: JWT tokens, caller identity
"""
import uuid
import pytest
from datetime import timedelta
from types import SimpleNamespace
from jose import jwt
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from app.core.security import (
    CurrentUser,
    create_access_token,
    decode_token,
    get_current_user,
)
from app.core.config import settings


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def fake_request():
    return SimpleNamespace(state=SimpleNamespace())


class TestJWTTokens:
    """Test JWT token functions"""

    def test_create_access_token(self):
        """Test creating access token"""
        token = create_access_token({"sub": "user123"})

        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        assert payload["sub"] == "user123"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_decode_token_invalid(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token("not-a-token")

        assert exc_info.value.status_code == 401

    def test_decode_token_expired(self):
        token = create_access_token({"sub": "user123"}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(HTTPException):
            decode_token(token)

    def test_decode_token_wrong_secret(self):
        token = jwt.encode({"sub": "user123", "type": "access"}, "other-secret", algorithm="HS256")

        with pytest.raises(HTTPException):
            decode_token(token)


class TestCurrentUser:
    """Test resolving the caller"""

    @pytest.mark.asyncio
    async def test_valid_token(self):
        user_id = str(uuid.uuid4())
        request = fake_request()
        token = create_access_token({"sub": user_id, "email": "owner@example.com"})

        user = await get_current_user(request, bearer(token))

        assert user == CurrentUser(id=user_id, email="owner@example.com")
        assert request.state.user_id == user_id

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(fake_request(), None)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_non_uuid_subject(self):
        token = create_access_token({"sub": "not-a-uuid"})

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(fake_request(), bearer(token))

        assert exc_info.value.detail == "Invalid token subject"

    @pytest.mark.asyncio
    async def test_refresh_token_type_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "type": "refresh"},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(fake_request(), bearer(token))

        assert exc_info.value.detail == "Invalid token type"
