"""
Domain errors for ingestion, retrieval and answer generation.

Every error carries a human-readable ``message`` plus a ``details`` dict
that is logged with it. The API layer maps each family to an HTTP status
(see ``ragchat.api.error_handling``).

    RAGChatException
    ├── DocumentProcessingError      ingestion input problems
    │   ├── UnsupportedFormatError
    │   ├── ParsingError
    │   └── EmbeddingError
    ├── VectorStoreError             index reads and writes
    │   └── IndexUnavailableError
    ├── SynthesisError               rewrite / generate model calls
    └── NotInitializedError          query before setup finished

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


def _merge(details: dict[str, Any] | None, **context: Any) -> dict[str, Any]:
    """Caller details plus the non-None context fields."""
    merged = dict(details or {})
    merged.update({key: value for key, value in context.items() if value is not None})
    return merged


class RAGChatException(Exception):
    """Root of the application's error hierarchy."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} | Details: {self.details}"


class DocumentProcessingError(RAGChatException):
    """A document could not be turned into chunks. Nothing was written."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.file_path = file_path
        super().__init__(message, _merge(details, file_path=file_path))


class UnsupportedFormatError(DocumentProcessingError):
    """No loader is registered for the file's extension."""

    def __init__(
        self,
        extension: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.extension = extension
        super().__init__(
            f"Unsupported file type: {extension or '<none>'}",
            file_path,
            _merge(details, extension=extension),
        )


class ParsingError(DocumentProcessingError):
    """File is missing, unreadable or has no text."""


class EmbeddingError(DocumentProcessingError):
    """Embedding model failed or returned the wrong number of vectors."""


class VectorStoreError(RAGChatException):
    """
    Vector index operation failed.

    Args:
        message: What went wrong
        operation: "bind", "upsert" or "search"
        details: Extra context for the log record
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.operation = operation
        super().__init__(message, _merge(details, operation=operation))


class IndexUnavailableError(VectorStoreError):
    """
    Index could not be loaded or searched.

    Transient from the client's point of view: the whole request may be
    retried. Nothing retries internally.
    """


class SynthesisError(RAGChatException):
    """
    A chat model call failed.

    ``stage`` says which call ("rewrite" or "generate"). ``tokens_emitted``
    tells a streaming caller whether part of the answer already went out,
    in which case the response status can no longer change.
    """

    def __init__(
        self,
        message: str,
        stage: str = "generate",
        tokens_emitted: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.stage = stage
        self.tokens_emitted = tokens_emitted
        super().__init__(message, _merge(details, stage=stage, tokens_emitted=tokens_emitted))


class NotInitializedError(RAGChatException):
    """Query issued while the pipeline is not READY."""

    def __init__(self, state: str, details: dict[str, Any] | None = None) -> None:
        self.state = state
        super().__init__(
            "ConversationPipeline not initialized. Call initialize() before querying.",
            _merge(details, state=state),
        )
