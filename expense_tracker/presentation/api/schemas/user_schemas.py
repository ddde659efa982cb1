"""Pydantic schemas for user API endpoints."""

from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

from ....domain.models import Currency, Gender, Language, Theme, User


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddressSchema(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None


class NotificationSchema(CamelModel):
    email: bool
    push: bool
    sms: bool


class PreferencesSchema(CamelModel):
    currency: Currency
    theme: Theme
    language: Language
    notifications: NotificationSchema


class UserResponse(CamelModel):
    """Public view of an account.

    Built field by field from the domain user so credentials, token hashes,
    lockout state and provider identifiers can never leak into a response.
    """

    id: str
    email: str
    name: str
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Gender
    address: AddressSchema
    is_email_verified: bool
    is_guest: bool
    guest_data: Optional[Dict[str, Any]] = None
    preferences: PreferencesSchema
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None


def sanitize_user(user: User) -> UserResponse:
    preferences = user.preferences
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        avatar_url=user.avatar_url,
        phone=user.phone,
        date_of_birth=user.date_of_birth,
        gender=user.gender,
        address=AddressSchema(
            street=user.address.street,
            city=user.address.city,
            state=user.address.state,
            country=user.address.country,
            zip_code=user.address.zip_code,
        ),
        is_email_verified=user.is_email_verified,
        is_guest=user.is_guest,
        guest_data=user.guest_data,
        preferences=PreferencesSchema(
            currency=preferences.currency,
            theme=preferences.theme,
            language=preferences.language,
            notifications=NotificationSchema(
                email=preferences.notifications.email,
                push=preferences.notifications.push,
                sms=preferences.notifications.sms,
            ),
        ),
        is_active=user.is_active,
        created_at=user.created_at,
        updated_at=user.updated_at,
        last_login_at=user.last_login_at,
    )


class UserEnvelope(CamelModel):
    user: UserResponse


class ProfileUpdateRequest(CamelModel):
    """Request schema for profile updates. Omitted fields are left untouched."""

    name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[AddressSchema] = None


class NotificationUpdate(CamelModel):
    email: Optional[bool] = None
    push: Optional[bool] = None
    sms: Optional[bool] = None


class PreferencesUpdateRequest(CamelModel):
    currency: Optional[Currency] = None
    theme: Optional[Theme] = None
    language: Optional[Language] = None
    notifications: Optional[NotificationUpdate] = None


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str
    confirm_password: str


class DeleteAccountRequest(CamelModel):
    password: Optional[str] = None


class UpgradeGuestRequest(CamelModel):
    name: str
    email: EmailStr
    password: str
