"""
Random code generators — pure, side-effect-free functions.

All generators draw from the ``secrets`` module.
"""

from __future__ import annotations

import secrets
import string


def generate_otp_code(length: int = 6) -> str:
    """Generate a cryptographically secure numeric OTP.

    Every digit is drawn independently, so leading zeros are allowed and the
    result always has exactly *length* characters.

    Args:
        length: Number of digits (default 6).

    Returns:
        String of random decimal digits.
    """
    if length <= 0:
        raise ValueError("OTP length must be positive")
    return "".join(secrets.choice(string.digits) for _ in range(length))
