"""FastAPI dependencies."""

from ragchat.api.deps.dependencies import (
    AppContext,
    build_app_context,
    get_app_context,
    get_pipeline,
)

__all__ = [
    "AppContext",
    "build_app_context",
    "get_app_context",
    "get_pipeline",
]
