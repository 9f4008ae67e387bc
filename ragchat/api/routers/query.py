"""
Query API endpoints.

Routes:
- POST /api/query - Answer a question (JSON, or SSE token stream when ``stream`` is true)
- POST /query - Same handler, unprefixed alias

Dependencies: ragchat.core.rag, ragchat.api.deps, ragchat.models
System role: Conversational Q&A HTTP API with streaming support
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from ragchat.api.deps import get_pipeline
from ragchat.core.exceptions import SynthesisError
from ragchat.core.rag.answer_synthesizer import AnswerStream
from ragchat.core.rag.pipeline import ConversationPipeline
from ragchat.core.rag.schemas import QueryMode, QueryResult
from ragchat.models.chat import (
    SOURCE_PREVIEW_CHARS,
    QueryRequest,
    QueryResponse,
    SourceDocument,
    to_chat_history,
)
from ragchat.models.streaming import TokenEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["query"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


def to_query_response(result: QueryResult) -> QueryResponse:
    """Map a pipeline result to the wire response with source previews."""
    sources = [
        SourceDocument(content=doc.preview(SOURCE_PREVIEW_CHARS), metadata=doc.metadata)
        for doc in result.sources
    ]
    return QueryResponse(answer=result.answer, sources=sources, retrieved_docs=len(sources))


@router.post("/api/query", response_model=QueryResponse)
@router.post("/query", response_model=QueryResponse, include_in_schema=False)
async def query(
    request: QueryRequest,
    pipeline: ConversationPipeline = Depends(get_pipeline),
):
    """
    Answer a question using the indexed documents and the supplied history.

    Streaming:
        data: {"token": "..."}

    The first fragment is pulled before the response starts, so a failure
    before any token is reported with an HTTP error status. A failure after
    that ends the stream.

    Args:
        request: Question, prior turns and stream flag
        pipeline: Injected ConversationPipeline

    Returns:
        QueryResponse | StreamingResponse: JSON answer or SSE stream of tokens

    Raises:
        NotInitializedError: Pipeline not ready (503)
        IndexUnavailableError: Vector search failed (503)
        SynthesisError: Model call failed (502)
    """
    question = (request.query or "").strip()
    if not question:
        return JSONResponse(status_code=400, content={"error": "Query is required"})

    chat_history = to_chat_history(request.history)
    logger.info(
        f"{__name__}:query - START stream={request.stream}",
        extra={"query_len": len(question), "history_len": len(chat_history)},
    )

    if not request.stream:
        result = await pipeline.query(question, chat_history, mode=QueryMode.BLOCKING)
        return to_query_response(result)

    stream: AnswerStream = await pipeline.query(question, chat_history, mode=QueryMode.STREAMING)
    try:
        first_token = await stream.__anext__()
    except StopAsyncIteration:
        first_token = None

    async def event_generator() -> AsyncGenerator[str, None]:
        """Relay answer fragments as SSE events."""
        try:
            if first_token is not None:
                yield TokenEvent(token=first_token).to_sse()
            async for token in stream:
                yield TokenEvent(token=token).to_sse()
            logger.info(
                f"{__name__}:query - Stream completed: {stream.fragment_count} fragments"
            )
        except SynthesisError as e:
            # Response already started: end the stream without an error payload.
            logger.error(f"{__name__}:query - Stream aborted: {e}")
        finally:
            await stream.aclose()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
