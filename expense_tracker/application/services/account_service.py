from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from typing import Any, Dict, Mapping, Optional

from ...domain.errors import DuplicateEmail, DuplicateKey, ValidationError
from ...domain.models import (
    Address,
    AuthResult,
    Currency,
    Gender,
    Language,
    NotificationSettings,
    Preferences,
    Theme,
    User,
)
from ...domain.ports.persistence import UserRepository
from ...domain.validation import normalize_email, validate_name, validate_password, validate_phone
from ...services.passwords import PasswordHasher
from .auth_service import AuthService

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "phone", "date_of_birth", "gender", "address")
ADDRESS_FIELDS = ("street", "city", "state", "country", "zip_code")


class AccountService:
    """Profile, preference and lifecycle changes for an authenticated account."""

    def __init__(
        self,
        users: UserRepository,
        auth_service: AuthService,
        password_hasher: Optional[PasswordHasher] = None,
    ) -> None:
        self._users = users
        self._auth = auth_service
        self._hasher = password_hasher or PasswordHasher()

    def update_profile(self, user: User, **changes: Any) -> User:
        unknown = set(changes) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationError.for_field(sorted(unknown)[0], "Field cannot be updated")

        fields: Dict[str, Any] = {}
        if changes.get("name") is not None:
            fields["name"] = validate_name(changes["name"])
        if "phone" in changes:
            fields["phone"] = validate_phone(changes["phone"]) if changes["phone"] else None
        if "date_of_birth" in changes:
            fields["date_of_birth"] = _parse_date(changes["date_of_birth"])
        if changes.get("gender") is not None:
            try:
                fields["gender"] = Gender(changes["gender"])
            except ValueError as exc:
                raise ValidationError.for_field("gender", "Invalid gender selection") from exc
        if changes.get("address") is not None:
            fields["address"] = _merge_address(user.address, changes["address"])

        if not fields:
            return user
        updated = self._users.update(user.id, **fields)
        logger.info("Updated profile fields %s for %s", sorted(fields), user.id)
        return updated

    def update_preferences(
        self,
        user: User,
        currency: Optional[str] = None,
        theme: Optional[str] = None,
        language: Optional[str] = None,
        notifications: Optional[Mapping[str, bool]] = None,
    ) -> User:
        current = user.preferences
        try:
            preferences = Preferences(
                currency=Currency(currency) if currency else current.currency,
                theme=Theme(theme) if theme else current.theme,
                language=Language(language) if language else current.language,
                notifications=current.notifications,
            )
        except ValueError as exc:
            raise ValidationError("Validation failed", errors=[{"field": "preferences", "message": str(exc)}]) from exc

        if notifications:
            merged = asdict(current.notifications)
            for key, value in notifications.items():
                if key not in merged:
                    raise ValidationError.for_field(f"notifications.{key}", "Unknown notification channel")
                if value is not None:
                    merged[key] = bool(value)
            preferences.notifications = NotificationSettings(**merged)

        return self._users.update(user.id, preferences=preferences)

    def change_password(self, user: User, current_password: str, new_password: str, confirm_password: str) -> None:
        if not current_password:
            raise ValidationError.for_field("currentPassword", "Current password is required")
        validate_password(new_password, self._auth.policy.password_min_length, field="newPassword")
        if new_password != confirm_password:
            raise ValidationError.for_field("confirmPassword", "Passwords do not match")
        if not self._hasher.verify(current_password, user.password_hash or ""):
            raise ValidationError.for_field("currentPassword", "Current password is incorrect")

        self._users.update(user.id, password=new_password)
        logger.info("Password changed for %s", user.id)

    def deactivate(self, user: User, password: Optional[str] = None) -> None:
        """Soft-delete the account. Accounts with a password must confirm it."""
        if user.has_password:
            if not password:
                raise ValidationError.for_field("password", "Password is required to delete account")
            if not self._hasher.verify(password, user.password_hash or ""):
                raise ValidationError.for_field("password", "Password is incorrect")
        self._users.update(user.id, is_active=False)
        logger.info("Deactivated account %s", user.id)

    def upgrade_guest(self, user: User, name: str, email: str, password: str) -> AuthResult:
        if not user.is_guest:
            raise ValidationError("Account is already upgraded")
        name_clean = validate_name(name)
        email_clean = normalize_email(email)
        validate_password(password, self._auth.policy.password_min_length)
        if self._users.find_by_email(email_clean):
            raise DuplicateEmail()

        try:
            upgraded = self._users.update(
                user.id,
                name=name_clean,
                email=email_clean,
                password=password,
                is_guest=False,
                guest_data=None,
                is_email_verified=False,
            )
        except DuplicateKey as exc:
            raise DuplicateEmail() from exc
        logger.info("Upgraded guest %s to a full account", user.id)

        upgraded = self._auth.start_email_verification(upgraded)
        return AuthResult(user=upgraded, tokens=self._auth.issue_tokens(upgraded))


def _parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise ValidationError.for_field("dateOfBirth", "Please enter a valid date") from exc


def _merge_address(current: Address, changes: Any) -> Address:
    if isinstance(changes, Address):
        changes = asdict(changes)
    if not isinstance(changes, Mapping):
        raise ValidationError.for_field("address", "Address must be an object")
    merged = asdict(current)
    for key in ADDRESS_FIELDS:
        if key in changes:
            merged[key] = changes[key] or None
    return Address(**merged)
