from datetime import datetime, timedelta, timezone

import pytest
from fastapi import status
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from storefront.config import settings
from storefront.dependencies import (
    get_current_admin,
    get_current_user_optional,
    get_payment_gateway,
    get_token_claims,
    is_admin,
)
from storefront.errors import PermissionDenied
from storefront.services.payment_gateway import StripeGateway


def _token(sub, **extra) -> str:
    payload = {"sub": str(sub), "exp": datetime.now(timezone.utc) + timedelta(hours=1), **extra}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def test_get_current_user_success(db, test_user):
    claims = get_token_claims(_credentials(_token(test_user.id)))
    user = get_current_user_optional(claims, db)
    assert user is not None
    assert user.id == test_user.id


def test_get_token_claims_none_without_credentials():
    assert get_token_claims(None) is None


def test_get_token_claims_invalid_token():
    assert get_token_claims(_credentials("invalid_token")) is None


def test_get_token_claims_rejects_non_access_token(test_user):
    assert get_token_claims(_credentials(_token(test_user.id, type="refresh"))) is None


def test_get_current_user_optional_none(db):
    assert get_current_user_optional(None, db) is None


def test_get_current_user_optional_bad_sub(db):
    assert get_current_user_optional({"sub": "not-a-number"}, db) is None


def test_get_current_user_expired_token(client, test_user):
    expired = jwt.encode(
        {"sub": str(test_user.id), "exp": datetime.now(timezone.utc) - timedelta(hours=1)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    response = client.get("/api/orders/me", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_get_current_user_nonexistent_user(client, db):
    response = client.get("/api/orders/me", headers={"Authorization": f"Bearer {_token(99999)}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_is_admin_needs_claim_and_flag(admin_user, test_user):
    assert is_admin(admin_user, {"admin": True}) is True
    assert is_admin(admin_user, {"admin": False}) is False
    assert is_admin(admin_user, None) is False
    assert is_admin(test_user, {"admin": True}) is False


def test_get_current_admin_raises_permission_denied(test_user):
    with pytest.raises(PermissionDenied):
        get_current_admin(test_user, {"sub": str(test_user.id), "admin": False})


def test_get_current_admin_returns_admin(admin_user):
    assert get_current_admin(admin_user, {"sub": str(admin_user.id), "admin": True}) is admin_user


def test_get_payment_gateway_uses_configured_key():
    gateway = get_payment_gateway()
    assert isinstance(gateway, StripeGateway)
    assert gateway.api_key == "sk_test_mock"
