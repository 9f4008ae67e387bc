"""
FastAPI application with assembled routers.

Initializes FastAPI app with routers, middleware and exception handlers,
and configures uvicorn server.

Dependencies: fastapi, uvicorn, python-dotenv, ragchat.api.routers, ragchat.observability
System role: API entry point with router assembly and server launch
"""

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ragchat.api.cors import OriginGuardMiddleware
from ragchat.api.deps.dependencies import AppContext, build_app_context
from ragchat.api.error_handling import register_exception_handlers
from ragchat.configs import Settings, get_settings
from ragchat.observability import configure_logging
from ragchat.observability.log_utils import log_exception_with_context
from ragchat.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import health_router, query_router

# Provider SDKs read GOOGLE_API_KEY / MISTRAL_API_KEY / GROQ_API_KEY from the process environment.
load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Builds the application context and initializes the pipeline eagerly.
    A failed initialization is logged; the app keeps serving and queries
    answer 503 until the process is restarted.
    """
    settings: Settings = app.state.settings
    context_factory: Callable[[Settings], AppContext] = app.state.context_factory

    # Startup
    context = context_factory(settings)
    app.state.context = context
    logger.info(
        f"{__name__}:lifespan - Initializing pipeline "
        f"(environment={settings.environment}, provider={context.provider.name})"
    )
    try:
        await context.pipeline.initialize()
        logger.info(f"{__name__}:lifespan - Pipeline ready")
    except Exception as e:
        log_exception_with_context(
            logger,
            f"{__name__}:lifespan - Pipeline initialization failed, serving 503",
            e,
            provider=context.provider.name,
        )

    yield

    # Shutdown
    app.state.context = None
    logger.info(f"{__name__}:lifespan - Application context cleared")


def create_app(
    settings: Settings | None = None,
    context_factory: Callable[[Settings], AppContext] = build_app_context,
) -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Args:
        settings: Application settings (defaults to get_settings())
        context_factory: Builds the AppContext at startup

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="RAG Chat API",
        description="Retrieval-augmented chat over ingested documents",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.context_factory = context_factory
    app.state.context = None

    allowed_origins = sorted(settings.api.origins)

    # Last added runs first: logging -> correlation -> origin guard -> CORS -> routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(OriginGuardMiddleware, allowed_origins=allowed_origins)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(query_router)

    return app


app = create_app()


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        "ragchat.api.main:app",
        host=_settings.api.host,
        port=_settings.api.port,
    )
