"""Account management routes for the signed-in user."""

from typing import Optional

from fastapi import APIRouter, Depends

from ....application.services.account_service import AccountService
from ....core.dependencies import get_account_service
from ....domain.models import User
from ..dependencies import get_current_user, require_full_account
from ..schemas.auth import AuthResponse, MessageResponse
from ..schemas.user_schemas import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    PreferencesUpdateRequest,
    ProfileUpdateRequest,
    UpgradeGuestRequest,
    UserEnvelope,
    sanitize_user,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=UserEnvelope)
def get_profile(user: User = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=sanitize_user(user))


@router.put("/profile", response_model=UserEnvelope)
def update_profile(
    payload: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
) -> UserEnvelope:
    changes = payload.model_dump(exclude_unset=True)
    updated = account_service.update_profile(user, **changes)
    return UserEnvelope(user=sanitize_user(updated))


@router.put("/preferences", response_model=UserEnvelope)
def update_preferences(
    payload: PreferencesUpdateRequest,
    user: User = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
) -> UserEnvelope:
    notifications = payload.notifications.model_dump(exclude_none=True) if payload.notifications else None
    updated = account_service.update_preferences(
        user,
        currency=payload.currency,
        theme=payload.theme,
        language=payload.language,
        notifications=notifications,
    )
    return UserEnvelope(user=sanitize_user(updated))


@router.put("/password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    user: User = Depends(require_full_account),
    account_service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    account_service.change_password(user, payload.current_password, payload.new_password, payload.confirm_password)
    return MessageResponse(message="Password changed successfully")


@router.delete("/account", response_model=MessageResponse)
def delete_account(
    payload: Optional[DeleteAccountRequest] = None,
    user: User = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    account_service.deactivate(user, payload.password if payload else None)
    return MessageResponse(message="Account deactivated successfully")


@router.post("/upgrade-guest", response_model=AuthResponse)
def upgrade_guest(
    payload: UpgradeGuestRequest,
    user: User = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
) -> AuthResponse:
    result = account_service.upgrade_guest(user, payload.name, payload.email, payload.password)
    return AuthResponse.from_result(result)
