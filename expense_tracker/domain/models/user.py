"""User domain model for password, OAuth and guest accounts."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class Currency(str, Enum):
    USD = "USD"
    INR = "INR"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    CAD = "CAD"
    AUD = "AUD"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


class Language(str, Enum):
    EN = "en"
    HI = "hi"
    ES = "es"
    FR = "fr"
    DE = "de"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer-not-to-say"


class OAuthProvider(str, Enum):
    GOOGLE = "google"
    FACEBOOK = "facebook"


@dataclass(slots=True)
class NotificationSettings:
    email: bool = True
    push: bool = True
    sms: bool = False


@dataclass(slots=True)
class Preferences:
    currency: Currency = Currency.INR
    theme: Theme = Theme.LIGHT
    language: Language = Language.EN
    notifications: NotificationSettings = field(default_factory=NotificationSettings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currency": self.currency.value,
            "theme": self.theme.value,
            "language": self.language.value,
            "notifications": asdict(self.notifications),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Preferences":
        data = data or {}
        defaults = cls()
        return cls(
            currency=Currency(data.get("currency") or defaults.currency),
            theme=Theme(data.get("theme") or defaults.theme),
            language=Language(data.get("language") or defaults.language),
            notifications=NotificationSettings(**(data.get("notifications") or {})),
        )


@dataclass(slots=True)
class Address:
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None


class User:
    """
    User entity covering password, OAuth and guest accounts.

    Attributes:
        id: Opaque identifier assigned by the store
        email: Lowercased email address (unique)
        name: Display name
        password_hash: bcrypt hash, absent for OAuth-only and guest accounts
        google_id / facebook_id: Linked OAuth provider identifiers
        is_email_verified: Whether the email address has been confirmed
        email_verification_token_hash / email_verification_expires_at: Open verification window
        password_reset_token_hash / password_reset_expires_at: Open password reset window
        failed_login_count: Consecutive failed password checks
        locked_until: End of the current lockout window, if any
        is_guest: Guest accounts have a synthetic email and no password
        is_active: False once the account has been deactivated
    """

    def __init__(
        self,
        id: str,
        email: str,
        name: str,
        password_hash: Optional[str] = None,
        google_id: Optional[str] = None,
        facebook_id: Optional[str] = None,
        avatar_url: Optional[str] = None,
        phone: Optional[str] = None,
        date_of_birth: Optional[date] = None,
        gender: Gender = Gender.PREFER_NOT_TO_SAY,
        address: Optional[Address] = None,
        is_email_verified: bool = False,
        email_verification_token_hash: Optional[str] = None,
        email_verification_expires_at: Optional[datetime] = None,
        password_reset_token_hash: Optional[str] = None,
        password_reset_expires_at: Optional[datetime] = None,
        failed_login_count: int = 0,
        locked_until: Optional[datetime] = None,
        is_guest: bool = False,
        guest_data: Optional[Dict[str, Any]] = None,
        preferences: Optional[Preferences] = None,
        is_active: bool = True,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        last_login_at: Optional[datetime] = None,
    ):
        self.id = id
        self.email = email
        self.name = name
        self.password_hash = password_hash
        self.google_id = google_id
        self.facebook_id = facebook_id
        self.avatar_url = avatar_url
        self.phone = phone
        self.date_of_birth = date_of_birth
        self.gender = gender
        self.address = address or Address()
        self.is_email_verified = is_email_verified
        self.email_verification_token_hash = email_verification_token_hash
        self.email_verification_expires_at = email_verification_expires_at
        self.password_reset_token_hash = password_reset_token_hash
        self.password_reset_expires_at = password_reset_expires_at
        self.failed_login_count = failed_login_count
        self.locked_until = locked_until
        self.is_guest = is_guest
        self.guest_data = guest_data
        self.preferences = preferences or Preferences()
        self.is_active = is_active
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or self.created_at
        self.last_login_at = last_login_at

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)

    def is_locked(self, now: Optional[datetime] = None) -> bool:
        if self.locked_until is None:
            return False
        return self.locked_until > (now or utcnow())

    def oauth_id(self, provider: OAuthProvider) -> Optional[str]:
        return self.google_id if provider is OAuthProvider.GOOGLE else self.facebook_id

    def is_authenticable(self) -> bool:
        """At least one sign-in method (password, OAuth or guest) is available."""
        return bool(self.password_hash or self.google_id or self.facebook_id or self.is_guest)

    def __repr__(self) -> str:
        return (
            f"<User id={self.id} email={self.email} guest={self.is_guest} "
            f"verified={self.is_email_verified} active={self.is_active}>"
        )
