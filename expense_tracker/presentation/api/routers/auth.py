"""Authentication routes: credentials, guest access, OAuth and token lifecycle."""

import logging
from typing import Dict, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse

from ....application.services.auth_service import AuthService
from ....core.config import Settings
from ....core.dependencies import get_auth_service, get_oauth_clients, get_settings, get_token_issuer
from ....domain.errors import ExpenseTrackerError, NotFound
from ....domain.models import OAuthProvider, User
from ....services.oauth_providers import OAuthClient
from ....services.token_issuer import TokenIssuer
from ..dependencies import get_current_user
from ..schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    GuestRequest,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    TokensResponse,
    TokensSchema,
)
from ..schemas.user_schemas import UserEnvelope, sanitize_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent"
VERIFICATION_RESENT_MESSAGE = "If the account exists and is unverified, a verification email has been sent"


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)) -> AuthResponse:
    result = auth_service.register(payload.name, payload.email, payload.password)
    return AuthResponse.from_result(result)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, auth_service: AuthService = Depends(get_auth_service)) -> AuthResponse:
    return AuthResponse.from_result(auth_service.login(payload.email, payload.password))


@router.post("/guest", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def guest_access(
    payload: Optional[GuestRequest] = None,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    guest_data = payload.guest_data if payload else None
    return AuthResponse.from_result(auth_service.guest_access(guest_data))


@router.post("/refresh", response_model=TokensResponse)
def refresh(payload: RefreshRequest, auth_service: AuthService = Depends(get_auth_service)) -> TokensResponse:
    return TokensResponse(tokens=TokensSchema.from_pair(auth_service.refresh(payload.refresh_token)))


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    auth_service.request_password_reset(payload.email)
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password", response_model=AuthResponse)
def reset_password(
    payload: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    return AuthResponse.from_result(auth_service.reset_password(payload.token, payload.new_password))


@router.get("/verify-email", response_model=MessageResponse)
def verify_email(
    token: str = Query(default=""),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    auth_service.verify_email(token)
    return MessageResponse(message="Email verified successfully")


@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification(
    payload: ResendVerificationRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    auth_service.resend_verification(payload.email)
    return MessageResponse(message=VERIFICATION_RESENT_MESSAGE)


@router.get("/me", response_model=UserEnvelope)
def me(user: User = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=sanitize_user(user))


@router.post("/logout", response_model=MessageResponse)
def logout(user: User = Depends(get_current_user)) -> MessageResponse:
    # Tokens are stateless; the client discards them.
    logger.info("User %s logged out", user.id)
    return MessageResponse(message="Logged out successfully")


@router.get("/{provider}")
def oauth_start(
    provider: OAuthProvider,
    clients: Dict[OAuthProvider, OAuthClient] = Depends(get_oauth_clients),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> RedirectResponse:
    client = _enabled_client(clients, provider)
    return RedirectResponse(client.authorization_url(token_issuer.issue_state()))


@router.get("/{provider}/callback")
def oauth_callback(
    provider: OAuthProvider,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    clients: Dict[OAuthProvider, OAuthClient] = Depends(get_oauth_clients),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    frontend = settings.frontend_url.rstrip("/")
    failure = RedirectResponse(f"{frontend}/auth/error?{urlencode({'message': 'oauth_failed'})}")
    client = _enabled_client(clients, provider)
    if error or not code or not state:
        logger.info("%s sign-in aborted (error=%s)", provider.value, error or "missing code/state")
        return failure

    try:
        token_issuer.verify_state(state)
        identity = client.fetch_identity(code)
        result = auth_service.oauth_callback(identity)
    except ExpenseTrackerError as exc:
        logger.warning("%s sign-in failed: %s (%s)", provider.value, exc.kind, exc.message)
        return failure

    query = urlencode(
        {"accessToken": result.tokens.access_token, "refreshToken": result.tokens.refresh_token}
    )
    return RedirectResponse(f"{frontend}/auth/callback?{query}")


def _enabled_client(clients: Dict[OAuthProvider, OAuthClient], provider: OAuthProvider) -> OAuthClient:
    client = clients.get(provider)
    if client is None or not client.enabled:
        raise NotFound(f"{provider.value.title()} sign-in is not configured")
    return client
