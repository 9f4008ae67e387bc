"""Document processing tasks."""

from .chunking_task import ChunkingTask
from .parsing_task import ParsingTask

__all__ = ["ChunkingTask", "ParsingTask"]
