from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.errors import PermissionDenied
from storefront.models import User, get_db
from storefront.services.notifications import NotificationDispatcher
from storefront.services.payment_gateway import StripeGateway

security = HTTPBearer(auto_error=False)


def _decode_access_token(token: str) -> dict | None:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("sub") is None:
        return None
    if payload.get("type") not in {None, "access"}:
        return None
    return payload


def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict | None:
    if not credentials:
        return None
    return _decode_access_token(credentials.credentials)


def get_current_user_optional(
    claims: Annotated[dict | None, Depends(get_token_claims)],
    db: Annotated[Session, Depends(get_db)],
) -> User | None:
    if not claims:
        return None
    sub = claims["sub"]
    try:
        user_id = int(sub) if not isinstance(sub, int) else sub
    except ValueError:
        return None
    return db.query(User).filter(User.id == user_id).first()


def get_current_user(
    user: Annotated[User | None, Depends(get_current_user_optional)],
) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def is_admin(user: User, claims: dict | None) -> bool:
    """The token must carry the admin claim and the account must still be an admin."""
    return bool(claims and claims.get("admin") is True and user.is_admin)


def get_current_admin(
    user: Annotated[User, Depends(get_current_user)],
    claims: Annotated[dict | None, Depends(get_token_claims)],
) -> User:
    if not is_admin(user, claims):
        raise PermissionDenied()
    return user


def get_payment_gateway() -> StripeGateway:
    return StripeGateway(api_key=settings.STRIPE_SECRET_KEY)


def get_notifier() -> NotificationDispatcher:
    return NotificationDispatcher()
