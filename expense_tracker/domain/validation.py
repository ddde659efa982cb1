"""Input normalisation and validation rules for accounts, transactions and categories."""

from __future__ import annotations

import math
import re
import unicodedata
from typing import Any, Optional

from email_validator import EmailNotValidError, validate_email

from .errors import ValidationError

PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
HEX_COLOR_PATTERN = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
# bcrypt only consumes the first 72 bytes of a password.
PASSWORD_MAX_BYTES = 72
MIN_AMOUNT = 0.01


def normalize_email(email: Optional[str]) -> str:
    """Validate the shape of an email address and return it lowercased."""
    candidate = (email or "").strip()
    if not candidate:
        raise ValidationError.for_field("email", "Email is required")
    try:
        result = validate_email(candidate, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValidationError.for_field("email", "Please provide a valid email") from exc
    return result.normalized.lower()


def canonical_email(email: Optional[str]) -> str:
    """Lookup form of an address: NFC, trimmed and lowercased, without shape checks."""
    return unicodedata.normalize("NFC", (email or "").strip()).lower()


def validate_password(password: Optional[str], min_length: int, field: str = "password") -> str:
    if not password:
        raise ValidationError.for_field(field, "Password is required")
    if len(password) < min_length:
        raise ValidationError.for_field(field, f"Password must be at least {min_length} characters")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError.for_field(field, f"Password cannot exceed {PASSWORD_MAX_BYTES} bytes")
    return password


def validate_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError.for_field("name", "Name is required")
    if not NAME_MIN_LENGTH <= len(cleaned) <= NAME_MAX_LENGTH:
        raise ValidationError.for_field(
            "name", f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )
    return cleaned


def validate_phone(phone: str) -> str:
    cleaned = phone.strip()
    if not PHONE_PATTERN.match(cleaned):
        raise ValidationError.for_field("phone", "Please enter a valid phone number")
    return cleaned


def validate_text(
    value: Optional[str], field: str, label: str, max_length: int, required: bool = True
) -> Optional[str]:
    cleaned = (value or "").strip()
    if not cleaned:
        if required:
            raise ValidationError.for_field(field, f"{label} is required")
        return None
    if len(cleaned) > max_length:
        raise ValidationError.for_field(field, f"{label} cannot exceed {max_length} characters")
    return cleaned


def validate_amount(amount: Any) -> float:
    try:
        value = round(float(amount), 2)
    except (TypeError, ValueError) as exc:
        raise ValidationError.for_field("amount", "Amount must be a positive number") from exc
    if not math.isfinite(value) or value < MIN_AMOUNT:
        raise ValidationError.for_field("amount", "Amount must be a positive number")
    return value


def validate_hex_color(color: Optional[str]) -> str:
    cleaned = (color or "").strip()
    if not HEX_COLOR_PATTERN.match(cleaned):
        raise ValidationError.for_field("color", "Color must be a valid hex color (e.g., #FF0000)")
    return cleaned
