"""
Health check API endpoints.

Routes: GET /, GET /api, GET /api/health

Dependencies: ragchat.api.deps
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ragchat.api.deps import AppContext, get_app_context


class MessageResponse(BaseModel):
    """Plain status message."""

    message: str


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    pipeline_state: str


router = APIRouter(tags=["health"])


@router.get("/", response_model=MessageResponse)
async def root() -> MessageResponse:
    """Liveness message."""
    return MessageResponse(message="Server is working fine")


@router.get("/api", response_model=MessageResponse)
async def api_root() -> MessageResponse:
    """API welcome message."""
    return MessageResponse(message="Welcome to the RAG API. The server is running.")


@router.get("/api/health", response_model=HealthResponse)
async def health_check(context: AppContext = Depends(get_app_context)) -> HealthResponse:
    """Readiness check reporting the pipeline state."""
    pipeline = context.pipeline
    return HealthResponse(
        status="healthy" if pipeline.is_ready else "unavailable",
        pipeline_state=pipeline.state.value,
    )
