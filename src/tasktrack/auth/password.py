"""Password hashing utilities.

Uses bcrypt for password hashing. bcrypt generates a fresh random salt
on every call, so hashing the same password twice gives two different
digests: always compare with verify_password(), never with ==.
The work factor comes from settings.bcrypt_rounds (12 ≈ 250ms per hash).
"""

import bcrypt

from tasktrack.config import settings


def _encode(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    """Hash a password with bcrypt. Digests start with "$2b$"."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a bcrypt digest.

    Returns False for a wrong password and for a malformed digest;
    never raises for either.
    """
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False
