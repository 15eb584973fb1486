"""Unit tests for JWT handler and auth dependencies."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import HTTPException
from jose import jwt

from config.settings import settings
from src.bk_common.enums import UserRole
from src.bk_common.errors import ForbiddenError, InvalidCredentialsError
from src.bk_gateway.auth.dependencies import (
    CurrentUser,
    ensure_account_access,
    get_current_user,
    require_admin,
)
from src.bk_gateway.auth.jwt_handler import create_access_token, decode_token


def _forge(payload: dict[str, object], secret: str | None = None) -> str:
    return str(jwt.encode(payload, secret or settings.JWT_SECRET, algorithm="HS256"))


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token(42, UserRole.ADMIN)
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "42"
    assert payload["role"] == "ADMIN"
    assert payload["type"] == "access"


def test_default_role_is_customer() -> None:
    payload = decode_token(create_access_token(1))
    assert payload["role"] == "CUSTOMER"


def test_expired_token_rejected() -> None:
    past = datetime.now(UTC) - timedelta(hours=1)
    token = _forge({"sub": "1", "type": "access", "iat": past, "exp": past + timedelta(minutes=1)})
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_wrong_secret_rejected() -> None:
    token = _forge({"sub": "1", "type": "access"}, secret="not-the-secret")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_non_access_token_rejected() -> None:
    token = _forge({"sub": "1", "type": "refresh"})
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_garbage_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token("not.a.jwt")


class TestGetCurrentUser:
    async def test_valid_token(self) -> None:
        user = await get_current_user(create_access_token(7, UserRole.ADMIN))
        assert user == CurrentUser(id=7, role=UserRole.ADMIN)
        assert user.is_admin

    async def test_invalid_token_is_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user("bad-token")
        assert exc_info.value.status_code == 401

    async def test_non_numeric_subject_is_401(self) -> None:
        token = _forge({"sub": "alice", "type": "access"})
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(token)
        assert exc_info.value.status_code == 401

    async def test_unknown_role_is_401(self) -> None:
        token = _forge({"sub": "1", "role": "ROOT", "type": "access"})
        with pytest.raises(HTTPException):
            await get_current_user(token)


class TestAuthorization:
    async def test_require_admin(self) -> None:
        admin = CurrentUser(1, UserRole.ADMIN)
        assert await require_admin(admin) is admin
        with pytest.raises(ForbiddenError):
            await require_admin(CurrentUser(2, UserRole.CUSTOMER))

    async def test_owner_allowed(self) -> None:
        ownership = _Ownership(owner_id=5)
        await ensure_account_access(CurrentUser(5, UserRole.CUSTOMER), 10, ownership)  # type: ignore[arg-type]

    async def test_non_owner_forbidden(self) -> None:
        ownership = _Ownership(owner_id=5)
        with pytest.raises(ForbiddenError):
            await ensure_account_access(CurrentUser(6, UserRole.CUSTOMER), 10, ownership)  # type: ignore[arg-type]

    async def test_admin_bypasses_lookup(self) -> None:
        ownership = _Ownership(owner_id=5)
        await ensure_account_access(CurrentUser(1, UserRole.ADMIN), 10, ownership)  # type: ignore[arg-type]
        assert ownership.calls == 0


class _Ownership:
    def __init__(self, owner_id: int) -> None:
        self.owner_id = owner_id
        self.calls = 0

    async def is_resource_owner(self, user_id: int, account_id: int) -> bool:
        self.calls += 1
        return user_id == self.owner_id
