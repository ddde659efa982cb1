from __future__ import annotations

import hashlib
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Tuple

from ...domain.errors import (
    AccountDeactivated,
    AccountLocked,
    DuplicateEmail,
    DuplicateIdentifier,
    DuplicateKey,
    InvalidCredentials,
    InvalidOrExpiredToken,
    InvalidToken,
    Unauthorized,
    UpstreamFailure,
)
from ...domain.models import (
    AuthResult,
    Currency,
    ExternalIdentity,
    OAuthProvider,
    Preferences,
    Theme,
    TokenPair,
    User,
    utcnow,
)
from ...domain.ports.persistence import UserRepository
from ...domain.validation import canonical_email, normalize_email, validate_name, validate_password
from ...services.email_service import EmailService
from ...services.passwords import PasswordHasher
from ...services.token_issuer import ACCESS, REFRESH, TokenIssuer

logger = logging.getLogger(__name__)

GUEST_NAME = "Guest User"
GUEST_EMAIL_DOMAIN = "expensetracker.local"


@dataclass(slots=True, frozen=True)
class AuthPolicy:
    password_min_length: int = 8
    max_login_attempts: int = 5
    lock_time: timedelta = timedelta(hours=2)
    email_verification_ttl: timedelta = timedelta(hours=24)
    password_reset_ttl: timedelta = timedelta(minutes=10)


def hash_token(token: str) -> str:
    """One-way hash stored in place of emailed reset/verification tokens."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_token() -> Tuple[str, str]:
    token = secrets.token_hex(32)
    return token, hash_token(token)


class AuthService:
    """Account creation, credential checks, lockout, reset and verification flows."""

    def __init__(
        self,
        users: UserRepository,
        token_issuer: TokenIssuer,
        email_service: EmailService,
        password_hasher: Optional[PasswordHasher] = None,
        policy: Optional[AuthPolicy] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._users = users
        self._tokens = token_issuer
        self._email = email_service
        self._hasher = password_hasher or PasswordHasher()
        self._policy = policy or AuthPolicy()
        self._clock = clock

    @property
    def policy(self) -> AuthPolicy:
        return self._policy

    # ------------------------------------------------------------------
    def register(self, name: str, email: str, password: str) -> AuthResult:
        """
        Create a password account and start email verification.

        Args:
            name: Display name (2-100 characters)
            email: Email address, stored lowercased
            password: Plain text password

        Returns:
            AuthResult with the stored user and a fresh token pair

        Raises:
            ValidationError: If a field is malformed
            DuplicateEmail: If the address is already registered
        """
        name_clean = validate_name(name)
        email_clean = normalize_email(email)
        validate_password(password, self._policy.password_min_length)
        if self._users.find_by_email(email_clean):
            raise DuplicateEmail()

        verification_token, verification_hash = generate_token()
        candidate = User(
            id=str(uuid.uuid4()),
            email=email_clean,
            name=name_clean,
            email_verification_token_hash=verification_hash,
            email_verification_expires_at=self._clock() + self._policy.email_verification_ttl,
            last_login_at=self._clock(),
        )
        try:
            user = self._users.insert(candidate, password=password)
        except DuplicateKey as exc:
            # Lost a race with a concurrent registration for the same address.
            raise DuplicateEmail() from exc
        logger.info("Registered user %s", user.id)

        self._dispatch_verification(user, verification_token)
        return AuthResult(user=user, tokens=self._tokens.issue(user))

    def login(self, email: str, password: str) -> AuthResult:
        """
        Check a password and apply the lockout policy.

        Unknown addresses, wrong passwords and accounts without a password all
        raise the same InvalidCredentials error.

        Raises:
            InvalidCredentials: If the credentials do not match
            AccountLocked: While a lockout window is open
            AccountDeactivated: If the account has been deactivated
        """
        # Synthetic guest and provider addresses use reserved domains, so no shape check here.
        email_clean = canonical_email(email)
        user = self._users.find_by_email(email_clean) if email_clean else None
        if user is None:
            raise InvalidCredentials()

        now = self._clock()
        if user.is_locked(now):
            raise AccountLocked()
        if not user.is_active:
            raise AccountDeactivated()

        if user.is_guest or not self._hasher.verify(password, user.password_hash or ""):
            updated = self._users.record_failed_login(
                user.id,
                max_attempts=self._policy.max_login_attempts,
                lock_until=now + self._policy.lock_time,
                now=now,
            )
            if updated.is_locked(now):
                logger.warning("Account %s locked after %s failed logins", user.id, updated.failed_login_count)
            raise InvalidCredentials()

        user = self._users.reset_login_attempts(user.id, now)
        return AuthResult(user=user, tokens=self._tokens.issue(user))

    def guest_access(self, guest_data: Optional[Dict[str, Any]] = None) -> AuthResult:
        hints = dict(guest_data or {})
        preferences = Preferences()
        for key, enum_type in (("currency", Currency), ("theme", Theme)):
            if not hints.get(key):
                continue
            try:
                setattr(preferences, key, enum_type(hints[key]))
            except ValueError:
                logger.debug("Ignoring unsupported guest %s hint: %r", key, hints[key])

        now = self._clock()
        candidate = User(
            id=str(uuid.uuid4()),
            email=f"guest_{int(now.timestamp() * 1000)}_{secrets.token_hex(4)}@{GUEST_EMAIL_DOMAIN}",
            name=GUEST_NAME,
            is_guest=True,
            guest_data=hints or None,
            is_email_verified=True,
            preferences=preferences,
            last_login_at=now,
        )
        user = self._users.insert(candidate)
        logger.info("Created guest account %s", user.id)
        return AuthResult(user=user, tokens=self._tokens.issue(user))

    def oauth_callback(self, identity: ExternalIdentity) -> AuthResult:
        """Resolve an OAuth identity: by provider id, then by email (linking), else create."""
        provider = OAuthProvider(identity.provider)
        id_field = f"{provider.value}_id"
        now = self._clock()

        user = self._users.find_by_oauth_id(provider, identity.provider_id)
        if user is None and identity.email:
            existing = self._users.find_by_email(identity.email)
            if existing is not None:
                user = self._link_provider(existing, identity, id_field, now)
        elif user is not None:
            self._ensure_active(user)
            user = self._users.update(user.id, last_login_at=now)
        if user is None:
            user = self._create_from_identity(identity, id_field, now)
        return AuthResult(user=user, tokens=self._tokens.issue(user))

    def request_password_reset(self, email: str) -> None:
        """Send a reset link; silent when the address is unknown."""
        email_clean = normalize_email(email)
        user = self._users.find_by_email(email_clean)
        if user is None or user.is_guest:
            logger.info("Password reset requested for unknown address")
            return

        reset_token, reset_hash = generate_token()
        self._users.update(
            user.id,
            password_reset_token_hash=reset_hash,
            password_reset_expires_at=self._clock() + self._policy.password_reset_ttl,
        )
        try:
            self._email.send_password_reset_email(user.email, user.name, reset_token)
        except UpstreamFailure:
            self._users.update(user.id, password_reset_token_hash=None, password_reset_expires_at=None)
            logger.warning("Rolled back password reset token for %s after email failure", user.id)
            raise
        logger.info("Password reset token issued for %s", user.id)

    def reset_password(self, token: str, new_password: str) -> AuthResult:
        validate_password(new_password, self._policy.password_min_length, field="newPassword")
        if not token:
            raise InvalidOrExpiredToken("Invalid or expired reset token")
        user = self._users.find_by_password_reset_hash(hash_token(token), self._clock())
        if user is None:
            raise InvalidOrExpiredToken("Invalid or expired reset token")

        # Writing the password also clears the reset fields, so the token is single-use.
        user = self._users.update(user.id, password=new_password)
        logger.info("Password reset completed for %s", user.id)
        return AuthResult(user=user, tokens=self._tokens.issue(user))

    def verify_email(self, token: str) -> User:
        if not token:
            raise InvalidOrExpiredToken("Verification token required")
        user = self._users.find_by_verification_hash(hash_token(token), self._clock())
        if user is None:
            raise InvalidOrExpiredToken("Invalid or expired verification token")
        return self._users.update(user.id, is_email_verified=True)

    def resend_verification(self, email: str) -> None:
        email_clean = normalize_email(email)
        user = self._users.find_by_email(email_clean)
        if user is None or user.is_guest or user.is_email_verified:
            return
        self.start_email_verification(user)

    def start_email_verification(self, user: User) -> User:
        """Open a fresh verification window for ``user`` and email the token."""
        token, token_hash = generate_token()
        user = self._users.update(
            user.id,
            email_verification_token_hash=token_hash,
            email_verification_expires_at=self._clock() + self._policy.email_verification_ttl,
        )
        self._dispatch_verification(user, token)
        return user

    def refresh(self, refresh_token: str) -> TokenPair:
        try:
            claims = self._tokens.verify(refresh_token, REFRESH)
        except Unauthorized as exc:
            raise InvalidToken("Invalid refresh token") from exc
        user = self._users.get_by_id(claims.user_id)
        if user is None or not user.is_active:
            raise InvalidToken("Invalid refresh token")
        return self._tokens.issue(user)

    def authenticate_token(self, access_token: str) -> User:
        """Resolve the live account behind an access token (TokenExpired/InvalidToken propagate)."""
        claims = self._tokens.verify(access_token, ACCESS)
        user = self._users.get_by_id(claims.user_id)
        if user is None:
            raise Unauthorized("Invalid token - user not found")
        if not user.is_active:
            raise Unauthorized("Account is deactivated")
        return user

    def issue_tokens(self, user: User) -> TokenPair:
        return self._tokens.issue(user)

    # ------------------------------------------------------------------
    def _dispatch_verification(self, user: User, token: str) -> None:
        # The account is already committed; a failed email must not undo it.
        try:
            self._email.send_verification_email(user.email, user.name, token)
        except UpstreamFailure:
            logger.warning("Verification email for %s could not be sent", user.id)

    def _link_provider(self, user: User, identity: ExternalIdentity, id_field: str, now: datetime) -> User:
        self._ensure_active(user)
        fields: Dict[str, Any] = {
            id_field: identity.provider_id,
            "is_email_verified": True,
            "last_login_at": now,
        }
        if identity.avatar_url and not user.avatar_url:
            fields["avatar_url"] = identity.avatar_url
        try:
            linked = self._users.update(user.id, **fields)
        except DuplicateKey as exc:
            raise DuplicateIdentifier() from exc
        logger.info("Linked %s account to user %s", identity.provider.value, user.id)
        return linked

    def _create_from_identity(self, identity: ExternalIdentity, id_field: str, now: datetime) -> User:
        email = identity.email or f"{identity.provider.value}_{identity.provider_id}@{identity.provider.value}.local"
        candidate = User(
            id=str(uuid.uuid4()),
            email=email.lower(),
            name=identity.display_name or email.split("@")[0],
            avatar_url=identity.avatar_url,
            is_email_verified=bool(identity.email and identity.email_verified),
            last_login_at=now,
        )
        setattr(candidate, id_field, identity.provider_id)
        try:
            user = self._users.insert(candidate)
        except DuplicateKey as exc:
            if exc.field == "email":
                raise DuplicateEmail() from exc
            raise DuplicateIdentifier() from exc
        logger.info("Created user %s from %s sign-in", user.id, identity.provider.value)
        return user

    @staticmethod
    def _ensure_active(user: User) -> None:
        if not user.is_active:
            raise AccountDeactivated()
