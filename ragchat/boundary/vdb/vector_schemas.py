"""
Search result types returned by the vector index.

Dependencies: pydantic, langchain_core
System role: Type definitions for vector operations
"""

from typing import Any

from langchain_core.documents import Document
from pydantic import BaseModel, Field

# Bookkeeping keys the index writes into chunk metadata but never returns.
INTERNAL_METADATA_KEYS = frozenset({"insertion_seq"})


class VectorSearchResult(BaseModel):
    """One retrieved chunk with its cosine similarity to the query."""

    chunk_id: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    similarity_score: float

    @classmethod
    def from_scored_document(cls, document: Document, score: float) -> "VectorSearchResult":
        return cls(
            chunk_id=document.metadata.get("chunk_id", ""),
            content=document.page_content,
            metadata={
                key: value
                for key, value in document.metadata.items()
                if key not in INTERNAL_METADATA_KEYS
            },
            similarity_score=float(score),
        )

    def preview(self, max_chars: int) -> str:
        return self.content[:max_chars]


# Best match first; equal scores keep insertion order.
RetrievalResult = list[VectorSearchResult]
