"""Custom middleware for the application."""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from app.config import settings

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def session_label(request: Request) -> str:
    """Short form of the caller's browsing session for log lines."""
    session_id = request.headers.get(settings.session_header_name) or request.cookies.get(
        settings.session_cookie_name
    )
    if not session_id:
        return "-"
    return session_id[:12]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log it against its flow session."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Log request details and timing.

        Args:
            request: Incoming request
            call_next: Next middleware/route handler

        Returns:
            Response: Route response
        """
        start_time = time.time()

        request_id = request.headers.get("X-Request-ID") or str(time.time_ns())
        request.state.request_id = request_id
        session = session_label(request)

        response = await call_next(request)

        duration = time.time() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        logger.debug(
            f"{request.method} {request.url.path} → {response.status_code} "
            f"in {duration:.3f}s [{request_id}] session={session}"
        )
        if duration > settings.slow_request_seconds:
            logger.warning(
                f"SLOW REQUEST: {request.method} {request.url.path} "
                f"took {duration:.3f}s (session={session})"
            )

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Security headers, plus no-cache rules for session-scoped API responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Add security headers to response.

        Args:
            request: Incoming request
            call_next: Next middleware/route handler

        Returns:
            Response: Route response with security headers
        """
        response = await call_next(request)

        response.headers.update(SECURITY_HEADERS)

        # API responses depend on the caller's session and must not be shared
        if request.url.path.startswith(settings.api_prefix):
            response.headers["Cache-Control"] = "no-store"
            response.headers.add_vary_header(settings.session_header_name)
            response.headers.add_vary_header("Cookie")

        if not settings.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response
