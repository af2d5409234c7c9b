"""Error kind → HTTP response translation.

The services raise TaskTrackError subclasses and know nothing about
HTTP. This module is the one place that decides status codes. Every
error response has the same body: {"detail": <message>, "code": <kind>}.

Anything that isn't a TaskTrackError (a dropped DB connection, a bug)
is logged with its traceback and answered with a bare 500, so internal
details never reach the client. RequestIdMiddleware builds that 500
with internal_error_response(), inside the security-header middleware,
so it carries the same headers as every other response.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tasktrack.errors import (
    DuplicateEmailError,
    ImmutableStateError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    NotFoundError,
    TaskTrackError,
)

logger = structlog.get_logger()

STATUS_BY_KIND: dict[str, int] = {
    DuplicateEmailError.kind: 400,
    InvalidCredentialsError.kind: 401,
    InvalidTokenError.kind: 401,
    MissingTokenError.kind: 401,
    NotFoundError.kind: 404,
    ImmutableStateError.kind: 400,
}

# Token problems invite the client to authenticate again.
_CHALLENGE_KINDS = {InvalidTokenError.kind, MissingTokenError.kind}


def status_for(exc: TaskTrackError) -> int:
    return STATUS_BY_KIND.get(exc.kind, 400)


async def handle_tasktrack_error(request: Request, exc: TaskTrackError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(
        "api.client_error",
        kind=exc.kind,
        status=status_code,
        path=request.url.path,
    )
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind in _CHALLENGE_KINDS else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.kind},
        headers=headers,
    )


def internal_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": "internal_error"},
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    # Last resort for failures raised outside RequestIdMiddleware.
    logger.exception("api.internal_error", path=request.url.path, exc_info=exc)
    return internal_error_response()


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskTrackError, handle_tasktrack_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
