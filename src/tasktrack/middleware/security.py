"""Security headers middleware.

Adds standard security headers to every response:
- X-Content-Type-Options: no MIME-type sniffing
- X-Frame-Options: no framing (clickjacking)
- X-XSS-Protection: legacy XSS filter for older browsers
- Referrer-Policy: limit referrer leakage
- Cache-Control: no-store on /api responses, which carry session
  tokens and per-user data
- Strict-Transport-Security: HTTPS connections only
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if request.url.path.startswith("/api/"):
            response.headers.setdefault("Cache-Control", "no-store")
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response
