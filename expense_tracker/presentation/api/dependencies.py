from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...application.services.auth_service import AuthService
from ...core.dependencies import get_auth_service
from ...domain.errors import Forbidden, Unauthorized
from ...domain.models import User

_bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """Resolve the live account behind the bearer token or fail with 401."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthorized("Access token required")
    return auth_service.authenticate_token(credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    if credentials is None or not credentials.credentials:
        return None
    try:
        return auth_service.authenticate_token(credentials.credentials)
    except Unauthorized:
        return None


def require_guest(user: User = Depends(get_current_user)) -> User:
    if not user.is_guest:
        raise Forbidden("This action is only available for guest accounts")
    return user


def require_full_account(user: User = Depends(get_current_user)) -> User:
    if user.is_guest:
        raise Forbidden("Please create a full account to access this feature")
    return user


def require_verified_email(user: User = Depends(get_current_user)) -> User:
    if not user.is_email_verified:
        raise Forbidden("Please verify your email address to access this feature")
    return user
