"""
Document ingestion stages.

Loader (ParsingTask) and Chunker (ChunkingTask) used by the conversation
pipeline's ingest workflow.
"""
