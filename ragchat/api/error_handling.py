"""
Exception handlers for the HTTP API.

Maps domain exceptions to HTTP status codes and the ``{"error": ...}``
body the browser client expects. Details stay in the logs.

Dependencies: fastapi, starlette, ragchat.core.exceptions
System role: Error-to-response mapping at the service boundary
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ragchat.core.exceptions import (
    IndexUnavailableError,
    NotInitializedError,
    RAGChatException,
    SynthesisError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal server error occurred"

# Most specific first: subclasses must precede their bases.
ERROR_STATUS: list[tuple[type[Exception], int, str]] = [
    (NotInitializedError, 503, "Service is not ready"),
    (IndexUnavailableError, 503, "Vector index is unavailable"),
    (SynthesisError, 502, "Language model request failed"),
]


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def status_for(exc: Exception) -> tuple[int, str]:
    """
    Resolve the HTTP status and public message for an exception.

    Args:
        exc: Raised exception

    Returns:
        tuple[int, str]: Status code and client-facing message
    """
    for exc_type, status_code, message in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status_code, message
    return 500, INTERNAL_ERROR_MESSAGE


async def rag_exception_handler(request: Request, exc: RAGChatException) -> JSONResponse:
    status_code, message = status_for(exc)
    logger.error(
        f"{__name__}:rag_exception_handler - {type(exc).__name__} -> {status_code}: {exc}",
        extra={"path": request.url.path, "status_code": status_code},
    )
    return error_response(status_code, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"{__name__}:unhandled_exception_handler - {type(exc).__name__}: {exc}",
        exc_info=exc,
        extra={"path": request.url.path},
    )
    return error_response(500, INTERNAL_ERROR_MESSAGE)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(404, "Endpoint not found")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(
        f"{__name__}:validation_exception_handler - Invalid request body",
        extra={"path": request.url.path, "error_count": len(exc.errors())},
    )
    return error_response(400, "Invalid request body")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the application."""
    app.add_exception_handler(RAGChatException, rag_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
