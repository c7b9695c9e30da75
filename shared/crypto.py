"""
Cryptographic helpers — password hashing and OTP code hashing.

Uses argon2 for passwords (via argon2-cffi) and HMAC-SHA256 for OTP codes.
"""

from __future__ import annotations

import hashlib
import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_password_hasher = PasswordHasher()


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id.

    Returns:
        Argon2 hash string (includes algorithm parameters and salt).
    """
    return _password_hasher.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify *plain_password* against an argon2 *password_hash*.

    Returns:
        ``True`` if the password matches, ``False`` for a mismatch or a
        malformed hash.
    """
    try:
        return _password_hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def hash_otp_code(code: str, key: str = "") -> str:
    """Return the hex-encoded HMAC-SHA256 of an OTP *code* under *key*.

    OTP records store this digest, never the plaintext code; verification
    hashes the submitted code with the same key and matches on the digest.
    The code space is small, so the digest only resists offline guessing
    while *key* stays out of the database.
    """
    return hmac.new(key.encode("utf-8"), code.encode("utf-8"), hashlib.sha256).hexdigest()
