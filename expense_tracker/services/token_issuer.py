"""Signed access/refresh token issuance and verification."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from ..domain.errors import InvalidToken, TokenExpired
from ..domain.models import TokenClaims, TokenPair, User

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"
OAUTH_STATE = "oauth_state"

_INSECURE_DEFAULTS = {"change-me", "change-me-refresh"}


class TokenIssuer:
    """Mints and verifies stateless JWTs.

    Access and refresh tokens carry the same identity claims but are signed
    with different secrets, so one can never be replayed as the other. There
    is no server-side revocation: logging out only discards tokens client-side.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expires: timedelta = timedelta(days=7),
        refresh_expires: timedelta = timedelta(days=30),
        algorithm: str = "HS256",
        state_expires: timedelta = timedelta(minutes=10),
    ) -> None:
        if not access_secret or not refresh_secret:
            raise RuntimeError("JWT_SECRET and JWT_REFRESH_SECRET must be configured.")
        if access_secret == refresh_secret:
            raise RuntimeError("JWT_SECRET and JWT_REFRESH_SECRET must differ.")
        if access_secret in _INSECURE_DEFAULTS or refresh_secret in _INSECURE_DEFAULTS:
            logger.warning("JWT secrets are using default values. Configure secure secrets in production.")
        self._secrets = {ACCESS: access_secret, REFRESH: refresh_secret, OAUTH_STATE: access_secret}
        self._expires = {ACCESS: access_expires, REFRESH: refresh_expires, OAUTH_STATE: state_expires}
        self._algorithm = algorithm

    def issue(self, user: User) -> TokenPair:
        claims = {"userId": user.id, "email": user.email, "isGuest": bool(user.is_guest)}
        return TokenPair(
            access_token=self._encode(claims, ACCESS),
            refresh_token=self._encode(claims, REFRESH),
        )

    def verify(self, token: str, kind: str = ACCESS) -> TokenClaims:
        payload = self._decode(token, kind)
        try:
            return TokenClaims(
                user_id=str(payload["userId"]),
                email=payload["email"],
                is_guest=bool(payload.get("isGuest", False)),
                token_type=payload["type"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken() from exc

    def issue_state(self) -> str:
        """Signed, short-lived value for the OAuth ``state`` parameter."""
        return self._encode({"nonce": secrets.token_urlsafe(16)}, OAUTH_STATE)

    def verify_state(self, state: str) -> None:
        self._decode(state, OAUTH_STATE)

    def _encode(self, claims: Dict[str, Any], kind: str) -> str:
        now = datetime.now(tz=timezone.utc)
        payload = {
            **claims,
            "type": kind,
            "iat": now,
            "exp": now + self._expires[kind],
            # Distinct tokens even when minted for the same user within one second.
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=self._algorithm)

    def _decode(self, token: str, kind: str) -> Dict[str, Any]:
        if kind not in self._secrets:
            raise ValueError(f"Unknown token kind: {kind}")
        if not token:
            raise InvalidToken()
        try:
            payload = jwt.decode(token, self._secrets[kind], algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidToken() from exc
        if payload.get("type") != kind:
            raise InvalidToken()
        return payload
