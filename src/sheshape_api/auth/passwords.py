"""
sheshape_api.auth.passwords

Password hashing delegated to `bcrypt`.
"""

from __future__ import annotations

import bcrypt

# bcrypt only considers the first 72 bytes of the secret; longer input is refused, never truncated.
MAX_PASSWORD_BYTES = 72


def password_too_long(plain: str) -> bool:
    return len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(plain: str, *, rounds: int = 12) -> str:
    if password_too_long(plain):
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(plain: str, hashed: str) -> bool:
    if password_too_long(plain):
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("ascii"))
    except ValueError:
        # Malformed/unknown hash formats never verify.
        return False
