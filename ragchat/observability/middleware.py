"""
Request observability middleware.

RequestLoggingMiddleware logs one line per request with status and
latency. CorrelationMiddleware binds the X-Correlation-ID for the request
and echoes it on the response.

Dependencies: fastapi, starlette, ragchat.observability.correlation
System role: Request/response observability injection
"""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ragchat.observability.correlation import (
    CORRELATION_HEADER,
    clear_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access log for the API.

    Streaming responses are logged when their headers are sent, so the
    latency covers time to first token rather than the whole answer.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        route = f"{request.method} {request.url.path}"
        request_info = {
            "method": request.method,
            "path": request.url.path,
            "origin": request.headers.get("origin", "-"),
            "client_host": request.client.host if request.client else None,
        }
        logger.info(f"[REQUEST] --> {route} from {request_info['origin']}", extra=request_info)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"[REQUEST] <-- {route} raised {type(e).__name__}",
                extra={**request_info, "process_time_ms": _elapsed_ms(started)},
            )
            raise

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            f"[REQUEST] <-- {route} {response.status_code}",
            extra={
                **request_info,
                "status_code": response.status_code,
                "process_time_ms": _elapsed_ms(started),
            },
        )
        return response


class CorrelationMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
