"""
RAG chat backend.

Ingests text and PDF documents into a FAISS vector index and answers
questions with history-aware retrieval and streamed LLM synthesis.
"""

__version__ = "0.1.0"
