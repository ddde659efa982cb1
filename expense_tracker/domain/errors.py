"""Error taxonomy shared by the services and the HTTP layer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ExpenseTrackerError(Exception):
    """Base class for errors surfaced to API callers with a stable ``kind``."""

    kind = "InternalError"
    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"status": "error", "kind": self.kind, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(ExpenseTrackerError):
    kind = "ValidationError"
    status_code = 400
    default_message = "Validation failed"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message}])


class DuplicateEmail(ExpenseTrackerError):
    kind = "DuplicateEmail"
    status_code = 400
    default_message = "Email is already registered"


class DuplicateIdentifier(ExpenseTrackerError):
    kind = "DuplicateIdentifier"
    status_code = 400
    default_message = "Identifier is already linked to another account"


class InvalidCredentials(ExpenseTrackerError):
    kind = "InvalidCredentials"
    status_code = 401
    default_message = "Invalid email or password"


class AccountLocked(ExpenseTrackerError):
    kind = "AccountLocked"
    status_code = 403
    default_message = "Account is temporarily locked due to too many failed login attempts. Try again later."


class AccountDeactivated(ExpenseTrackerError):
    kind = "AccountDeactivated"
    status_code = 403
    default_message = "Account is deactivated"


class InvalidOrExpiredToken(ExpenseTrackerError):
    kind = "InvalidOrExpiredToken"
    status_code = 400
    default_message = "Invalid or expired token"


class Unauthorized(ExpenseTrackerError):
    kind = "Unauthorized"
    status_code = 401
    default_message = "Access token required"


class InvalidToken(Unauthorized):
    kind = "InvalidToken"
    default_message = "Invalid token"


class TokenExpired(Unauthorized):
    kind = "TokenExpired"
    default_message = "Token expired"


class Forbidden(ExpenseTrackerError):
    kind = "Forbidden"
    status_code = 403
    default_message = "Access denied"


class NotFound(ExpenseTrackerError):
    kind = "NotFound"
    status_code = 404
    default_message = "Resource not found"


class UpstreamFailure(ExpenseTrackerError):
    """An external collaborator (SMTP server, OAuth provider) failed or timed out."""

    kind = "UpstreamFailure"
    status_code = 502
    default_message = "An upstream service is unavailable"
    retryable = True

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["retryable"] = self.retryable
        return body


class EmailDeliveryError(UpstreamFailure):
    default_message = "Failed to send email"


class DuplicateKey(Exception):
    """Raised by the store when a unique column collides."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Duplicate value for unique field '{field}'")
