"""Request ID + access log middleware.

Every request gets an id, either from the incoming X-Request-ID header
or a fresh UUID. It is bound to structlog's contextvars, so every log
line written while handling the request (service logs included) carries
request_id, and it is echoed back in the response header. One
"http.request" line per request records method, path, status, and
duration.

An exception that escapes the route is logged here with its traceback
and turned into the generic 500, so that response still passes back
through the header middlewares.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from tasktrack.api.errors import internal_error_response

logger = structlog.get_logger()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate and propagate a unique request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception(
                "api.internal_error",
                method=request.method,
                path=request.url.path,
            )
            response = internal_error_response()

        logger.info(
            "http.request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        response.headers["X-Request-ID"] = request_id
        return response
