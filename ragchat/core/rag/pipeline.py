"""
Conversation pipeline.

Owns the one-time setup (chat model, embeddings, vector index binding) and
orchestrates the two conversational flows:

Ingestion: parse -> chunk -> embed -> store
Query:     rewrite (history only) -> retrieve -> synthesize (blocking or streamed)

Dependencies: ragchat.core.document_processing, ragchat.boundary, ragchat.core.rag
System role: Application-level orchestration of ingestion and conversational Q&A
"""

import asyncio
import logging
import threading
import time
from pathlib import Path

from fastapi.concurrency import run_in_threadpool
from langchain_core.messages import BaseMessage

from ragchat.boundary.llm.providers import ModelProvider
from ragchat.boundary.vdb.faiss_vectors_store import FAISSVectorsStore
from ragchat.boundary.vdb.vector_store_factory import create_vector_store, get_vector_store
from ragchat.configs import Settings, get_settings
from ragchat.core.document_processing.tasks.chunking_task import ChunkingTask
from ragchat.core.document_processing.tasks.parsing_task import ParsingTask
from ragchat.core.exceptions import NotInitializedError
from ragchat.core.rag.answer_synthesizer import AnswerStream, AnswerSynthesizer
from ragchat.core.rag.history_aware_retriever import HistoryAwareRetriever
from ragchat.core.rag.schemas import IngestionResult, PipelineState, QueryMode, QueryResult
from ragchat.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


class ConversationPipeline:
    """
    Ingestion and query orchestration over one vector index.

    ``initialize`` must complete before ``query``. It is safe to call
    concurrently: all callers await the same setup, which runs once.
    After a failed setup the pipeline stays FAILED and every later call
    re-raises the original error.
    """

    def __init__(
        self,
        provider: ModelProvider,
        settings: Settings | None = None,
        vector_store: FAISSVectorsStore | None = None,
        parsing_task: ParsingTask | None = None,
        chunking_task: ChunkingTask | None = None,
    ) -> None:
        """
        Initialize pipeline (no models are built until ``initialize``).

        Args:
            provider: Chat/embedding model provider
            settings: Application settings (defaults to get_settings())
            vector_store: Pre-bound vector index (bound from settings when None)
            parsing_task: Document parser (defaults to ParsingTask())
            chunking_task: Chunker (defaults to ChunkingTask from ingestion settings)
        """
        self._settings = settings or get_settings()
        self._provider = provider
        self._vector_store = vector_store
        self._parsing_task = parsing_task or ParsingTask()
        self._chunking_task = chunking_task or ChunkingTask(
            chunk_size=self._settings.ingestion.chunk_size,
            chunk_overlap=self._settings.ingestion.chunk_overlap,
        )

        # Guards embeddings construction and the vector store binding, which
        # initialize and ingest both perform from worker threads.
        self._store_lock = threading.RLock()

        self._state = PipelineState.UNINITIALIZED
        self._init_task: asyncio.Task | None = None
        self._embeddings = None
        self._retriever: HistoryAwareRetriever | None = None
        self._synthesizer: AnswerSynthesizer | None = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is PipelineState.READY

    @property
    def vector_store(self) -> FAISSVectorsStore | None:
        return self._vector_store

    async def initialize(self) -> None:
        """
        Build models and bind the vector index. Idempotent.

        Raises:
            IndexUnavailableError: Persisted index cannot be loaded
            Exception: Model construction failed (pipeline left FAILED)
        """
        if self._state is PipelineState.READY:
            return

        if self._init_task is None:
            self._state = PipelineState.INITIALIZING
            self._init_task = asyncio.ensure_future(self._initialize())

        # Shield so a cancelled caller does not cancel setup for the others.
        await asyncio.shield(self._init_task)

    async def _initialize(self) -> None:
        start = time.time()
        logger.info(f"{__name__}:initialize - START provider={self._provider.name}")
        try:
            llm = self._provider.chat_model()
            vector_store = await run_in_threadpool(self._bind_vector_store)
            self._retriever = HistoryAwareRetriever(
                llm=llm,
                vector_store=vector_store,
                k=self._settings.vector_store.top_k,
            )
            self._synthesizer = AnswerSynthesizer(llm=llm)
        except Exception as e:
            self._state = PipelineState.FAILED
            log_exception_with_context(
                logger,
                f"{__name__}:initialize - FAILED",
                e,
                provider=self._provider.name,
            )
            raise

        self._state = PipelineState.READY
        logger.info(
            f"{__name__}:initialize - READY in {(time.time() - start) * 1000:.0f}ms",
            extra={"records": self._vector_store.count},
        )

    async def ingest(self, file_path: str) -> IngestionResult:
        """
        Parse, chunk, embed and store one document.

        Does not require ``initialize``; embeddings are built on demand.

        Args:
            file_path: Path to a .txt, .md or .pdf file

        Returns:
            IngestionResult: Counts, timing and stored chunk IDs

        Raises:
            UnsupportedFormatError: Extension has no loader (nothing written)
            ParsingError: File missing, unreadable or empty (nothing written)
            EmbeddingError: Embedding failed (nothing written)
            VectorStoreError: Index write failed
        """
        start = time.time()
        log_with_context(logger, logging.INFO, f"{__name__}:ingest - START", file_path=file_path)
        try:
            result = await run_in_threadpool(self._ingest_sync, file_path)
        except Exception as e:
            log_exception_with_context(logger, f"{__name__}:ingest - FAILED", e, file_path=file_path)
            raise

        result.processing_time_ms = (time.time() - start) * 1000
        logger.info(
            f"{__name__}:ingest - SUCCESS: {result.document_count} documents, {result.chunk_count} chunks",
            extra={"file_path": file_path, "processing_time_ms": result.processing_time_ms},
        )
        return result

    def _ensure_embeddings(self):
        with self._store_lock:
            if self._embeddings is None:
                self._embeddings = self._provider.embeddings()
            return self._embeddings

    def _bind_vector_store(self) -> FAISSVectorsStore:
        """Bind the configured index unless ingestion already created one."""
        with self._store_lock:
            embeddings = self._ensure_embeddings()
            if self._vector_store is None:
                self._vector_store = get_vector_store(embeddings, self._settings)
            return self._vector_store

    def _ingest_sync(self, file_path: str) -> IngestionResult:
        documents = self._parsing_task.parse(file_path)
        chunks = self._chunking_task.chunk(documents)

        with self._store_lock:
            embeddings = self._ensure_embeddings()
            store = self._vector_store
            if store is None:
                self._vector_store = create_vector_store(chunks, embeddings, self._settings)
                chunk_ids = [chunk.metadata["chunk_id"] for chunk in chunks]
        if store is not None:
            chunk_ids = store.upsert(chunks)

        return IngestionResult(
            file_path=str(Path(file_path)),
            document_count=len(documents),
            chunk_count=len(chunks),
            processing_time_ms=0.0,
            chunk_ids=chunk_ids,
        )

    async def query(
        self,
        question: str,
        chat_history: list[BaseMessage] | None = None,
        mode: QueryMode = QueryMode.BLOCKING,
    ) -> QueryResult | AnswerStream:
        """
        Answer a question grounded on the indexed documents.

        Args:
            question: User question
            chat_history: Prior turns, oldest first (not modified)
            mode: BLOCKING returns a QueryResult, STREAMING an AnswerStream

        Returns:
            QueryResult | AnswerStream: Complete answer, or a stream of fragments

        Raises:
            NotInitializedError: ``initialize`` has not completed
            SynthesisError: Rewrite or generation failed
            IndexUnavailableError: Vector search failed
        """
        if self._state is not PipelineState.READY:
            raise NotInitializedError(self._state.value)

        history = list(chat_history or [])
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:query - START mode={mode.value}",
            question=question,
            history_len=len(history),
        )

        try:
            results = await self._retriever.aretrieve(question, history)
            if mode is QueryMode.STREAMING:
                return self._synthesizer.astream(question, history, results)
            return await self._synthesizer.ainvoke(question, history, results)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:query - FAILED",
                e,
                question=question,
                mode=mode.value,
            )
            raise
