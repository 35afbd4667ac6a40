"""
club_access.auth.passwords

bcrypt password hashing.
"""

from __future__ import annotations

import bcrypt

# bcrypt only consumes the first 72 bytes of input.
_MAX_BYTES = 72


def hash_password(password: str, *, rounds: int) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8")[:_MAX_BYTES], salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            password.encode("utf-8")[:_MAX_BYTES], password_hash.encode("utf-8")
        )
    except ValueError:
        # Malformed stored hash.
        return False
