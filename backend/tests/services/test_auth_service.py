"""
Tests for AuthService: registration, login, refresh and password changes.
"""

import pytest

from tourify.auth import create_access_token, create_refresh_token, decode_access_token
from tourify.core.enums import UserRole, UserStatus
from tourify.core.exceptions import ConflictException, UnauthorizedException, ValidationException
from tourify.schemas.auth import RegisterRequest
from tourify.services.auth_service import AuthService


@pytest.fixture
def auth_service(db) -> AuthService:
    return AuthService(db)


def test_register_tourist_by_default(auth_service):
    user = auth_service.register(
        RegisterRequest(name="Ana", email="Ana@Example.com", password="secret123")
    )
    assert user.role == UserRole.TOURIST.value
    assert user.email == "ana@example.com"
    assert user.status == UserStatus.ACTIVE.value


def test_register_guide(auth_service):
    user = auth_service.register(
        RegisterRequest(name="Rui", email="rui@example.com", password="secret123", role="GUIDE")
    )
    assert user.role == UserRole.GUIDE.value


def test_register_cannot_claim_admin():
    with pytest.raises(ValueError):
        RegisterRequest(name="Eve", email="eve@example.com", password="secret123", role="ADMIN")


def test_register_duplicate_email(auth_service, tourist):
    with pytest.raises(ConflictException):
        auth_service.register(
            RegisterRequest(name="Again", email=tourist.email, password="secret123")
        )


def test_login_issues_tokens(auth_service, tourist, test_password):
    user, tokens = auth_service.login(tourist.email, test_password)
    assert user.id == tourist.id
    assert tokens["token_type"] == "bearer"
    payload = decode_access_token(tokens["access_token"])
    assert payload["sub"] == tourist.id
    assert payload["role"] == UserRole.TOURIST.value


def test_login_wrong_password(auth_service, tourist):
    with pytest.raises(UnauthorizedException) as exc:
        auth_service.login(tourist.email, "not-the-password")
    assert exc.value.code == "INVALID_CREDENTIALS"


def test_login_unknown_email(auth_service):
    with pytest.raises(UnauthorizedException):
        auth_service.login("nobody@example.com", "whatever")


@pytest.mark.parametrize("status", [UserStatus.BLOCKED, UserStatus.DELETED])
def test_inactive_accounts_cannot_login(auth_service, make_user, test_password, status):
    user = make_user(UserRole.TOURIST, status=status)
    with pytest.raises(UnauthorizedException) as exc:
        auth_service.login(user.email, test_password)
    assert exc.value.code == "ACCOUNT_NOT_ACTIVE"


def test_refresh_issues_new_tokens(auth_service, tourist):
    tokens = auth_service.refresh(create_refresh_token({"sub": tourist.id}))
    assert decode_access_token(tokens["access_token"])["sub"] == tourist.id


def test_refresh_rejects_garbage(auth_service):
    with pytest.raises(UnauthorizedException):
        auth_service.refresh("not-a-token")
    with pytest.raises(UnauthorizedException):
        auth_service.refresh(None)


def test_refresh_rejects_access_token(auth_service, tourist):
    with pytest.raises(UnauthorizedException):
        auth_service.refresh(create_access_token({"sub": tourist.id}))


def test_change_password(auth_service, tourist, test_password):
    auth_service.change_password(tourist, test_password, "fresh-password")
    user, _ = auth_service.login(tourist.email, "fresh-password")
    assert user.need_password_change is False


def test_change_password_requires_old_password(auth_service, tourist):
    with pytest.raises(ValidationException):
        auth_service.change_password(tourist, "wrong-old", "fresh-password")
