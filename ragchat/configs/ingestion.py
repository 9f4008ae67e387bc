"""
Ingestion configuration settings.

Chunking parameters for the document ingestion job.

Dependencies: pydantic, pydantic_settings
System role: Chunker configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from ragchat.configs.base import section_config


class IngestionSettings(BaseSettings):
    """Document chunking configuration."""

    model_config = section_config("INGESTION_")

    chunk_size: int = Field(default=1000, gt=0, description="Maximum chunk size in characters")
    chunk_overlap: int = Field(default=200, ge=0, description="Overlap between consecutive chunks")

    @model_validator(mode="after")
    def _check_overlap(self) -> "IngestionSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        return self
