"""Tests for the authentication module.

Covers JWT creation and decoding, expiry, and the get_current_user
dependency (missing header, bad token, unknown and inactive users).
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from statuspage.core.auth import create_access_token, decode_token, get_current_user
from statuspage.core.config import Settings
from statuspage.core.models import User, UserRole


@pytest.fixture
def settings() -> Settings:
    """Create test settings with known secret key."""
    return Settings(
        jwt_secret_key="test-secret-key-for-tests",
        jwt_algorithm="HS256",
        jwt_access_token_expire_minutes=30,
        _env_file=None,  # type: ignore[call-arg]
    )


def _request_with_user(user: User | None) -> MagicMock:
    """A request whose app.state session factory yields a session returning ``user``."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = user
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)

    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=session)
    factory.return_value.__aexit__ = AsyncMock(return_value=None)

    request = MagicMock()
    request.app.state.db_session_factory = factory
    return request


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestCreateAccessToken:
    def test_round_trip_claims(self, settings: Settings) -> None:
        token = create_access_token({"sub": "user-1"}, settings)
        payload = decode_token(token, settings)
        assert payload["sub"] == "user-1"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_expired_token_rejected(self, settings: Settings) -> None:
        token = create_access_token({"sub": "user-1"}, settings, expires_delta=timedelta(seconds=-5))
        with pytest.raises(HTTPException) as exc_info:
            decode_token(token, settings)
        assert exc_info.value.status_code == 401

    def test_wrong_secret_rejected(self, settings: Settings) -> None:
        token = jwt.encode({"sub": "x"}, "another-secret", algorithm="HS256")
        with pytest.raises(HTTPException):
            decode_token(token, settings)


class TestGetCurrentUser:
    async def test_missing_credentials(self, settings: Settings) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_request_with_user(None), None, settings)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Not authenticated"

    async def test_valid_token_returns_user(self, settings: Settings) -> None:
        user = User(id=uuid.uuid4(), email="a@b.c", name="A", role=UserRole.OWNER, is_active=True)
        token = create_access_token({"sub": str(user.id)}, settings)

        result = await get_current_user(_request_with_user(user), _bearer(token), settings)
        assert result is user

    async def test_unknown_user(self, settings: Settings) -> None:
        token = create_access_token({"sub": str(uuid.uuid4())}, settings)
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_request_with_user(None), _bearer(token), settings)
        assert exc_info.value.detail == "User not found"

    async def test_inactive_user(self, settings: Settings) -> None:
        user = User(id=uuid.uuid4(), email="a@b.c", name="A", role=UserRole.OWNER, is_active=False)
        token = create_access_token({"sub": str(user.id)}, settings)
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_request_with_user(user), _bearer(token), settings)
        assert exc_info.value.detail == "User account is disabled"

    async def test_missing_subject(self, settings: Settings) -> None:
        token = create_access_token({"role": "owner"}, settings)
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_request_with_user(None), _bearer(token), settings)
        assert exc_info.value.detail == "Token missing subject claim"

    async def test_malformed_subject(self, settings: Settings) -> None:
        token = create_access_token({"sub": "not-a-uuid"}, settings)
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_request_with_user(None), _bearer(token), settings)
        assert exc_info.value.detail == "Invalid user ID in token"

    async def test_refresh_style_token_rejected(self, settings: Settings) -> None:
        token = jwt.encode({"sub": str(uuid.uuid4()), "type": "refresh"}, settings.jwt_secret_key, algorithm="HS256")
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(_request_with_user(None), _bearer(token), settings)
        assert exc_info.value.detail == "Invalid token type"
