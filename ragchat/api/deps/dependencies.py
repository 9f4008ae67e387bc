"""
Dependency injection container.

The application context (settings, model provider, pipeline) is built once
by the lifespan and stored on ``app.state``; request handlers reach it
through these dependencies.

Dependencies: fastapi, ragchat.configs, ragchat.boundary.llm, ragchat.core.rag
System role: DI container for service injection
"""

from dataclasses import dataclass

from fastapi import Depends, Request

from ragchat.boundary.llm import ModelProvider, get_provider
from ragchat.configs import Settings, get_settings
from ragchat.core.exceptions import NotInitializedError
from ragchat.core.rag.pipeline import ConversationPipeline
from ragchat.core.rag.schemas import PipelineState


@dataclass
class AppContext:
    """Process-wide collaborators shared by all requests."""

    settings: Settings
    provider: ModelProvider
    pipeline: ConversationPipeline


def build_app_context(settings: Settings | None = None) -> AppContext:
    """
    Build the application context from settings.

    Args:
        settings: Application settings (defaults to get_settings())

    Returns:
        AppContext: Context with an uninitialized pipeline
    """
    settings = settings or get_settings()
    provider = get_provider(settings.llm)
    pipeline = ConversationPipeline(provider=provider, settings=settings)
    return AppContext(settings=settings, provider=provider, pipeline=pipeline)


def get_app_context(request: Request) -> AppContext:
    """Get the context created by the lifespan."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise NotInitializedError(PipelineState.UNINITIALIZED.value)
    return context


def get_pipeline(context: AppContext = Depends(get_app_context)) -> ConversationPipeline:
    """Get the conversation pipeline."""
    return context.pipeline
