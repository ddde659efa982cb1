from typing import Any, Dict, Optional

from pydantic import EmailStr

from ....domain.models import AuthResult, TokenPair
from .user_schemas import CamelModel, UserResponse, sanitize_user


class RegisterRequest(CamelModel):
    name: str
    email: EmailStr
    password: str


class LoginRequest(CamelModel):
    email: str
    password: str


class GuestRequest(CamelModel):
    guest_data: Optional[Dict[str, Any]] = None


class RefreshRequest(CamelModel):
    refresh_token: str


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str
    new_password: str


class ResendVerificationRequest(CamelModel):
    email: EmailStr


class TokensSchema(CamelModel):
    access_token: str
    refresh_token: str

    @classmethod
    def from_pair(cls, tokens: TokenPair) -> "TokensSchema":
        return cls(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


class AuthResponse(CamelModel):
    user: UserResponse
    tokens: TokensSchema

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(user=sanitize_user(result.user), tokens=TokensSchema.from_pair(result.tokens))


class TokensResponse(CamelModel):
    tokens: TokensSchema


class MessageResponse(CamelModel):
    message: str
