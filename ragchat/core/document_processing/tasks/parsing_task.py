"""
Document parsing task using LangChain document loaders.

Converts text and PDF files into LangChain Documents, dispatching on the
file extension.

Dependencies: langchain_community.document_loaders, pypdf
System role: First stage of document ingestion pipeline
"""

import hashlib
import logging
from collections.abc import Callable
from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader, TextLoader
from langchain_core.document_loaders import BaseLoader
from langchain_core.documents import Document

from ragchat.core.exceptions import ParsingError, UnsupportedFormatError

logger = logging.getLogger(__name__)


def _text_loader(file_path: str) -> BaseLoader:
    return TextLoader(file_path, encoding="utf-8")


LOADERS: dict[str, Callable[[str], BaseLoader]] = {
    ".txt": _text_loader,
    ".md": _text_loader,
    ".pdf": PyPDFLoader,
}


class ParsingTask:
    """Parse text and PDF documents into LangChain Documents."""

    def __init__(self, loaders: dict[str, Callable[[str], BaseLoader]] | None = None) -> None:
        """
        Initialize parsing task.

        Args:
            loaders: Extension -> loader factory mapping (defaults to LOADERS)
        """
        self._loaders = loaders or LOADERS

    @property
    def supported_extensions(self) -> tuple[str, ...]:
        return tuple(sorted(self._loaders))

    def parse(self, file_path: str) -> list[Document]:
        """
        Parse a document into LangChain Documents.

        Text files produce one Document; PDFs produce one Document per page.

        Args:
            file_path: Path to the document

        Returns:
            list[Document]: Parsed documents with content and metadata

        Raises:
            UnsupportedFormatError: Extension has no registered loader
            ParsingError: File missing, unreadable or empty
        """
        path = Path(file_path)
        extension = path.suffix.lower()

        loader_factory = self._loaders.get(extension)
        if loader_factory is None:
            raise UnsupportedFormatError(extension, file_path)

        if not path.is_file():
            raise ParsingError(f"File not found: {file_path}", file_path)

        try:
            documents = loader_factory(str(path)).load()
        except Exception as e:
            raise ParsingError(f"Failed to parse {extension} file: {e}", file_path) from e

        if not documents or not any(doc.page_content.strip() for doc in documents):
            raise ParsingError("Document contains no extractable text", file_path)

        for index, doc in enumerate(documents):
            doc.metadata.setdefault("source", str(path))
            doc.metadata["document_id"] = self._generate_document_id(path, doc.metadata.get("page", index))

        logger.info(
            f"{__name__}:parse - Loaded {len(documents)} documents",
            extra={"file_path": file_path, "extension": extension},
        )
        return documents

    def _generate_document_id(self, path: Path, page: int) -> str:
        """
        Generate a stable document ID from the resolved path and page.

        Returns:
            str: SHA-256 hash prefix (16 chars)
        """
        hash_input = f"{path.resolve()}:{page}"
        return hashlib.sha256(hash_input.encode()).hexdigest()[:16]
