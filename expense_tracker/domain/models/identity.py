from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .user import OAuthProvider, User


@dataclass(slots=True, frozen=True)
class ExternalIdentity:
    """Provider-neutral view of an OAuth profile."""

    provider: OAuthProvider
    provider_id: str
    email: Optional[str]
    display_name: Optional[str]
    avatar_url: Optional[str]
    email_verified: bool


@dataclass(slots=True, frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(slots=True, frozen=True)
class TokenClaims:
    user_id: str
    email: str
    is_guest: bool
    token_type: str
    issued_at: datetime
    expires_at: datetime


@dataclass(slots=True)
class AuthResult:
    user: User
    tokens: TokenPair
