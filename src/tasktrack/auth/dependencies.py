"""FastAPI auth dependencies.

Used as Depends() in route handlers to turn the request's
Authorization header into a verified CurrentIdentity. Token possession
is always passed in explicitly through the header; nothing about the
caller is kept between requests.
"""

from typing import Optional

from fastapi import Header

from tasktrack.auth.jwt import extract_bearer_token, verify_token


class CurrentIdentity:
    """The authenticated user making the request.

    All project/task queries are scoped by user_id from here, never by
    an id supplied in the request body.
    """

    def __init__(self, user_id: int, email: str):
        self.user_id = user_id
        self.email = email

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id!r}, email={self.email!r})"


async def get_current_user(
    authorization: Optional[str] = Header(None),
) -> CurrentIdentity:
    """Resolve the Bearer token to an identity (required).

    Raises MissingTokenError / InvalidTokenError; the app's error
    handlers turn both into 401 with WWW-Authenticate: Bearer.
    """
    token = extract_bearer_token(authorization)
    identity = verify_token(token)
    return CurrentIdentity(user_id=identity.user_id, email=identity.email)
