from fastapi import status
from jose import jwt

from storefront.config import settings
from storefront.models.user import User


def _register_payload(email: str = "newuser@example.com", display_name: str = "New User") -> dict:
    return {
        "displayName": display_name,
        "email": email,
        "password": "password123",
        "confirmPassword": "password123",
    }


def test_register_success(client, db):
    response = client.post("/api/auth/register", json=_register_payload())

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["email"] == "newuser@example.com"
    assert data["displayName"] == "New User"
    assert data["isAdmin"] is False

    user = db.query(User).filter(User.email == "newuser@example.com").first()
    assert user is not None
    assert user.is_admin is False


def test_register_duplicate_email(client, test_user):
    response = client.post("/api/auth/register", json=_register_payload(email=test_user.email))
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "already registered" in response.json()["detail"].lower()


def test_register_password_too_short(client):
    payload = _register_payload()
    payload["password"] = "short"
    payload["confirmPassword"] = "short"
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_register_password_confirmation_mismatch(client):
    payload = _register_payload()
    payload["confirmPassword"] = "different123"
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_login_success_carries_admin_claim(client, test_user):
    response = client.post(
        "/api/auth/login",
        json={"email": "test@example.com", "password": "testpassword123"},
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["tokenType"] == "bearer"
    assert data["expiresIn"] == settings.JWT_EXPIRE_MINUTES * 60
    claims = jwt.decode(data["accessToken"], settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    assert claims["sub"] == str(test_user.id)
    assert claims["type"] == "access"
    assert claims["admin"] is False


def test_admin_login_token_has_admin_claim(client, admin_user):
    response = client.post(
        "/api/auth/login",
        json={"email": "admin@example.com", "password": "testpassword123"},
    )

    claims = jwt.decode(response.json()["accessToken"], settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    assert claims["admin"] is True


def test_login_wrong_password(client, test_user):
    response = client.post(
        "/api/auth/login",
        json={"email": "test@example.com", "password": "wrongpassword"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_login_unknown_email(client):
    response = client.post(
        "/api/auth/login",
        json={"email": "nobody@example.com", "password": "testpassword123"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_me(client, test_user, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["id"] == test_user.id
    assert data["isAdmin"] is False


def test_me_requires_auth(client):
    response = client.get("/api/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
