"""Error kinds raised by the auth and project/task services.

Every failure a client can cause is one of the classes below. Each class
carries a ``kind`` tag; callers match on the class (or the tag), never on
the message text. Mapping kinds to HTTP status codes is the API layer's
job (see ``tasktrack.api.errors``), not the services'.
"""

from typing import Optional


class TaskTrackError(Exception):
    """Base class for all client-caused failures."""

    kind = "error"
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateEmailError(TaskTrackError):
    kind = "duplicate_email"
    default_message = "User with this email already exists"


class InvalidCredentialsError(TaskTrackError):
    """Unknown email and wrong password both raise this, with one message."""

    kind = "invalid_credentials"
    default_message = "Invalid email or password"


class InvalidTokenError(TaskTrackError):
    kind = "invalid_token"
    default_message = "Invalid token"


class MissingTokenError(TaskTrackError):
    kind = "missing_token"
    default_message = "No token provided"


class NotFoundError(TaskTrackError):
    """Resource doesn't exist, or exists but belongs to another user."""

    kind = "not_found"
    default_message = "Not found"


class ImmutableStateError(TaskTrackError):
    """Mutation attempted on a task whose finish date has passed."""

    kind = "immutable_state"
    default_message = "Cannot modify finished tasks"
