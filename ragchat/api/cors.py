"""
Cross-origin access control.

The allow/deny decision is the pure ``is_allowed_origin`` predicate; the
middleware only applies it. Allowed origins get their CORS headers from
Starlette's CORSMiddleware.

Dependencies: fastapi, starlette
System role: Browser origin gate for the HTTP API
"""

import logging
from collections.abc import Iterable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


def is_allowed_origin(origin: str | None, allowed: Iterable[str]) -> bool:
    """
    Decide whether a request origin may call the API.

    Requests without an Origin header (server-to-server, curl) are allowed.

    Args:
        origin: Value of the Origin header, or None when absent
        allowed: Allowed origins

    Returns:
        bool: True when the request may proceed
    """
    if not origin:
        return True
    return origin in set(allowed)


class OriginGuardMiddleware(BaseHTTPMiddleware):
    """Reject requests whose Origin header is not allowed."""

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str]) -> None:
        super().__init__(app)
        self.allowed_origins = frozenset(allowed_origins)

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin")
        if not is_allowed_origin(origin, self.allowed_origins):
            logger.warning(
                f"{__name__}:dispatch - Rejected origin {origin}",
                extra={"origin": origin, "path": request.url.path},
            )
            return JSONResponse(status_code=403, content={"error": "Not allowed by CORS"})
        return await call_next(request)
