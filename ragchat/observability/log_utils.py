"""
Structured logging helpers.

Questions, chat histories and chunk lists end up in log records as
``extra`` fields. These helpers turn them into short strings first so a
20-turn history or a 5 MB document never lands in the log verbatim.

Dependencies: logging (stdlib), pydantic, ragchat.core.exceptions
System role: Logging helper functions
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from ragchat.core.exceptions import RAGChatException

MAX_VALUE_LENGTH = 500


def _describe(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple, set)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, Mapping):
        return f"dict({len(value)} keys)"
    if isinstance(value, BaseModel):
        return f"<{type(value).__name__}>"
    return str(value)


def safe_log_value(value: Any, max_length: int = MAX_VALUE_LENGTH) -> str:
    """
    Render one context value as a bounded string.

    Containers are summarised by size and pydantic models by class name.
    Anything longer than ``max_length`` is cut and annotated with its
    original length.
    """
    if value is None:
        return "None"
    try:
        text = _describe(value)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"

    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}... (truncated, {len(text)} total)"


def build_log_context(**context: Any) -> dict[str, str]:
    """Map every context value through ``safe_log_value``."""
    return {key: safe_log_value(value) for key, value in context.items()}


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    logger.log(level, message, extra=build_log_context(**context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log ``exc`` at ERROR with its traceback and context.

    Domain errors contribute their bare message and their ``details``
    (flattened to ``key=value`` pairs) instead of the combined ``str()``.
    """
    extra = build_log_context(**context)
    extra["error_type"] = type(exc).__name__

    if isinstance(exc, RAGChatException):
        extra["error_msg"] = safe_log_value(exc.message)
        if exc.details:
            pairs = ", ".join(f"{key}={val}" for key, val in exc.details.items())
            extra["error_details"] = safe_log_value(pairs)
    else:
        extra["error_msg"] = safe_log_value(str(exc))

    logger.error(message, exc_info=exc, extra=extra)
