"""
Chunking stage of ingestion.

Cuts parsed documents into overlapping, contiguous slices of at most
``chunk_size`` characters, preferring paragraph and sentence boundaries,
and stamps each slice with a stable ``chunk_id``.

Dependencies: langchain_text_splitters
System role: Second stage of document ingestion pipeline
"""

import hashlib

from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

# Paragraph, line, sentence, word, then hard character cuts.
SEPARATORS = ["\n\n", "\n", ". ", " ", ""]

CHUNK_ID_LENGTH = 16


def chunk_id_for(chunk: Document) -> str:
    """
    Content-addressed ID: re-ingesting the same file yields the same IDs,
    which is what makes index upserts idempotent.
    """
    origin = chunk.metadata.get("source_document_id") or chunk.metadata.get("source", "")
    key = f"{chunk.page_content}:{origin}:{chunk.metadata.get('start_index', 0)}"
    return hashlib.sha256(key.encode()).hexdigest()[:CHUNK_ID_LENGTH]


class ChunkingTask:
    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200) -> None:
        """
        Args:
            chunk_size: Upper bound on chunk length in characters
            chunk_overlap: Characters shared by neighbouring chunks; must be < chunk_size

        Raises:
            ValueError: Overlap not smaller than size
        """
        if chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=SEPARATORS,
            keep_separator="end",
            add_start_index=True,
            length_function=len,
        )

    def chunk(self, documents: list[Document]) -> list[Document]:
        """
        Chunk every document, keeping document then position order.

        Each chunk inherits its document's metadata and gains
        ``start_index``, ``chunk_index``, ``source_document_id`` and
        ``chunk_id``.

        Raises:
            ValueError: ``documents`` is empty
        """
        if not documents:
            raise ValueError("No documents to chunk")

        chunks = self._splitter.split_documents(documents)
        for position, chunk in enumerate(chunks):
            metadata = chunk.metadata
            metadata["source_document_id"] = metadata.get("document_id", "")
            metadata["chunk_index"] = position
            metadata["chunk_id"] = chunk_id_for(chunk)
        return chunks
