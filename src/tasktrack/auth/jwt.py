"""JWT session token creation and verification.

Tokens are stateless: the signature and the ``exp`` claim are all that
is checked, there is no server-side session table and no revocation
list. Logging out means the client drops the token.

Claims:
- sub:   user id (string, per RFC 7519)
- email: user email
- iat / exp: issued-at and absolute expiry
- jti:   random id, so two tokens for the same user never collide
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from tasktrack.config import settings
from tasktrack.errors import InvalidTokenError, MissingTokenError

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class TokenIdentity:
    """The identity a session token asserts."""

    user_id: int
    email: str


def create_access_token(
    identity: TokenIdentity,
    expires_in: Optional[timedelta] = None,
) -> str:
    """Create a signed session token for ``identity``."""
    now = datetime.now(timezone.utc)
    if expires_in is None:
        expires_in = timedelta(days=settings.access_token_expire_days)
    payload = {
        "sub": str(identity.user_id),
        "email": identity.email,
        "iat": now,
        "exp": now + expires_in,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> TokenIdentity:
    """Verify and decode a session token.

    Raises InvalidTokenError for a bad signature, a malformed token,
    missing claims, or an expired token. Callers can't tell which.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "email", "exp"]},
        )
        return TokenIdentity(user_id=int(payload["sub"]), email=str(payload["email"]))
    except (jwt.InvalidTokenError, ValueError, TypeError):
        raise InvalidTokenError()


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Strip the "Bearer " scheme from an Authorization header value.

    Raises MissingTokenError if the header is absent, uses another
    scheme, or carries an empty token.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MissingTokenError()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise MissingTokenError()
    return token
