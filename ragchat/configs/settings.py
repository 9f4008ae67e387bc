"""
Root settings object.

One ``Settings`` instance holds every section (models, index, chunking,
HTTP) plus the runtime flags, so the API and the ingest CLI read exactly
the same configuration.

Dependencies: ragchat.configs section modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from ragchat.configs.api import APISettings
from ragchat.configs.base import BaseSettings
from ragchat.configs.ingestion import IngestionSettings
from ragchat.configs.llm import LLMSettings
from ragchat.configs.vector_store import VectorStoreSettings


class Settings(BaseSettings):
    llm: LLMSettings = Field(default_factory=LLMSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    api: APISettings = Field(default_factory=APISettings)


@lru_cache
def get_settings() -> Settings:
    """
    Process-wide settings, read from the environment on first call.

    Tests and tools that need different values should build ``Settings``
    directly and pass it in rather than mutating this instance.
    """
    return Settings()
