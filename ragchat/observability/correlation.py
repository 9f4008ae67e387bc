"""
Per-request correlation IDs.

The ID lives in a ContextVar, so it follows a request through awaits and
into ``run_in_threadpool`` workers (which copy the current context).

Dependencies: contextvars, uuid
System role: Request tracing across service boundaries
"""

import uuid
from contextvars import ContextVar

CORRELATION_HEADER = "X-Correlation-ID"

_current_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def new_correlation_id() -> str:
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind ``correlation_id`` (or a fresh UUID) to the current context and return it."""
    value = correlation_id or new_correlation_id()
    _current_id.set(value)
    return value


def get_correlation_id() -> str:
    """Correlation ID of the request being served; empty outside a request."""
    return _current_id.get() or ""


def clear_correlation_id() -> None:
    _current_id.set(None)
