"""
Conversation pipeline schemas.

Dependencies: pydantic, ragchat.boundary.vdb.vector_schemas
System role: Result and state types shared by the RAG core
"""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field

from ragchat.boundary.vdb.vector_schemas import VectorSearchResult


class PipelineState(str, Enum):
    """Lifecycle of a ConversationPipeline."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class QueryMode(str, Enum):
    """How the answer is delivered."""

    BLOCKING = "blocking"
    STREAMING = "streaming"


class QueryResult(BaseModel):
    """Complete answer with the chunks it was grounded on."""

    answer: str
    sources: list[VectorSearchResult] = Field(default_factory=list)


@dataclass
class IngestionResult:
    """Result from ingesting one file."""

    file_path: str
    document_count: int
    chunk_count: int
    processing_time_ms: float
    chunk_ids: list[str] = field(default_factory=list)
