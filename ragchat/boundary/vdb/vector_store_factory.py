"""
Vector store factory.

Binds the configured FAISS index with the provider's embedding model.

Dependencies: ragchat.boundary.vdb, ragchat.configs
System role: Vector store instantiation
"""

import logging

from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from ragchat.boundary.vdb.faiss_vectors_store import FAISSVectorsStore
from ragchat.configs import Settings, get_settings

logger = logging.getLogger(__name__)


def get_vector_store(embeddings: Embeddings, settings: Settings | None = None) -> FAISSVectorsStore:
    """
    Bind to the configured vector index (no writes).

    Args:
        embeddings: Embedding model used for queries and new chunks
        settings: Application settings (defaults to get_settings())

    Returns:
        FAISSVectorsStore: Client bound to the persisted index

    Raises:
        IndexUnavailableError: Persisted index exists but cannot be read
    """
    settings = settings or get_settings()
    logger.info(
        f"{__name__}:get_vector_store - Binding FAISS index "
        f"{settings.vector_store.index_dir}/{settings.vector_store.index_name}"
    )
    return FAISSVectorsStore.bind(
        embeddings,
        index_dir=settings.vector_store.index_dir,
        index_name=settings.vector_store.index_name,
    )


def create_vector_store(
    chunks: list[Document],
    embeddings: Embeddings,
    settings: Settings | None = None,
) -> FAISSVectorsStore:
    """
    Create the configured vector index and populate it with chunks.

    Args:
        chunks: Chunked documents to embed and store
        embeddings: Embedding model
        settings: Application settings (defaults to get_settings())

    Returns:
        FAISSVectorsStore: Client bound to the populated index
    """
    settings = settings or get_settings()
    logger.info(f"{__name__}:create_vector_store - Populating index with {len(chunks)} chunks")
    return FAISSVectorsStore.from_documents(
        chunks,
        embeddings,
        index_dir=settings.vector_store.index_dir,
        index_name=settings.vector_store.index_name,
    )
