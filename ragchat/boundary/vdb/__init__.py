"""
Vector database boundary layer.

Provides the FAISS-backed vector index client for storage and retrieval.

Dependencies: langchain_community.vectorstores, faiss-cpu
System role: Vector store adapter for RAG retrieval
"""

from ragchat.boundary.vdb.vector_schemas import RetrievalResult, VectorSearchResult

__all__ = [
    "RetrievalResult",
    "VectorSearchResult",
]
