"""
Vector store configuration settings.

Manages the local FAISS index location and retrieval parameters.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for RAG retrieval
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from ragchat.configs.base import section_config


class VectorStoreSettings(BaseSettings):
    """FAISS vector index configuration."""

    model_config = section_config("VECTOR_STORE_")

    index_dir: str = Field(
        default=".faiss_index",
        description="Directory holding the persisted FAISS index",
    )
    index_name: str = Field(default="documents", description="FAISS index file stem")

    top_k: int = Field(
        default=2,
        ge=1,
        le=50,
        description="Number of chunks retrieved per question",
    )
