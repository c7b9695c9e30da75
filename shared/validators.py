"""
Input normalisers and validators — framework-agnostic, pure functions.
"""

from __future__ import annotations

import re

import validators as _validators

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


def normalize_email(email: str | None) -> str:
    """Trim and lower-case an email address. ``None`` becomes ``""``."""
    if email is None:
        return ""
    return email.strip().lower()


def validate_email(email: str) -> bool:
    """Return True if *email* is a syntactically valid address."""
    if not email:
        return False
    return bool(_validators.email(email))


def normalize_otp_code(code: str | None) -> str:
    """Strip surrounding and inner whitespace from a submitted OTP code."""
    if code is None:
        return ""
    return re.sub(r"\s+", "", code)


def is_well_formed_otp(code: str, length: int = 6) -> bool:
    """Return True if *code* is exactly *length* decimal digits."""
    return len(code) == length and re.fullmatch(r"[0-9]+", code) is not None


def validate_password(password: str) -> tuple[bool, list[str]]:
    """Validate a new account password.

    Rules:
    - 8 to 128 characters
    - At least one letter
    - At least one digit

    Returns:
        ``(is_valid, missing_requirements)``
    """
    if not password:
        return False, ["Password is required"]

    missing = []
    if len(password) < PASSWORD_MIN_LENGTH:
        missing.append(f"At least {PASSWORD_MIN_LENGTH} characters")
    if len(password) > PASSWORD_MAX_LENGTH:
        missing.append(f"Maximum {PASSWORD_MAX_LENGTH} characters")
    if not re.search(r"[A-Za-z]", password):
        missing.append("At least one letter")
    if not re.search(r"[0-9]", password):
        missing.append("At least one number")

    return len(missing) == 0, missing
