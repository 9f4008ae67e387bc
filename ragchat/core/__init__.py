"""Core domain: exceptions, ingestion tasks and the RAG conversation pipeline."""
