"""
History-aware retriever.

Rewrites a follow-up question into a standalone search query using the
conversation history, then searches the vector index with it. A first turn
(empty history) is searched verbatim without calling the model.

Dependencies: langchain_core, fastapi.concurrency, ragchat.boundary.vdb
System role: Retrieval stage of the RAG conversation pipeline
"""

import logging
from typing import Protocol

from fastapi.concurrency import run_in_threadpool
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate

from ragchat.boundary.vdb.vector_schemas import RetrievalResult
from ragchat.core.exceptions import SynthesisError
from ragchat.core.rag.prompts import REPHRASE_PROMPT, content_to_text

logger = logging.getLogger(__name__)


class VectorIndex(Protocol):
    """Anything that can run a top-k similarity search."""

    def similarity_search(self, query: str, k: int = 2) -> RetrievalResult: ...


class HistoryAwareRetriever:
    """
    Two-step retriever: rewrite (only when there is history), then search.

    No retries: a failed rewrite fails the query rather than silently
    falling back to the raw question.
    """

    def __init__(
        self,
        llm: BaseChatModel,
        vector_store: VectorIndex,
        k: int = 2,
        prompt: ChatPromptTemplate = REPHRASE_PROMPT,
    ) -> None:
        """
        Initialize retriever.

        Args:
            llm: Chat model used to rewrite follow-up questions
            vector_store: Vector index to search
            k: Number of chunks to retrieve
            prompt: Rephrase prompt with ``chat_history`` and ``input`` variables
        """
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        self._llm = llm
        self._vector_store = vector_store
        self._prompt = prompt
        self.k = k

    async def arewrite(self, question: str, chat_history: list[BaseMessage] | None = None) -> str:
        """
        Produce the search query for a question.

        Args:
            question: Raw user question
            chat_history: Prior turns, oldest first

        Returns:
            str: Standalone search query (the question itself when history is empty)

        Raises:
            SynthesisError: Rewrite model call failed or returned nothing
        """
        if not chat_history:
            return question

        messages = self._prompt.invoke({
            "chat_history": chat_history,
            "input": question,
        }).to_messages()

        try:
            response = await self._llm.ainvoke(messages)
        except Exception as e:
            logger.error(f"{__name__}:arewrite - FAILED: {type(e).__name__}: {e}")
            raise SynthesisError(
                f"Query rewrite failed: {e}",
                stage="rewrite",
                tokens_emitted=False,
            ) from e

        rewritten = content_to_text(response.content).strip()
        if not rewritten:
            raise SynthesisError("Query rewrite returned an empty query", stage="rewrite")

        logger.info(
            f"{__name__}:arewrite - Rewrote question using {len(chat_history)} history messages",
            extra={"question_len": len(question), "query_len": len(rewritten)},
        )
        return rewritten

    async def aretrieve(
        self,
        question: str,
        chat_history: list[BaseMessage] | None = None,
    ) -> RetrievalResult:
        """
        Rewrite (if needed) and search.

        Args:
            question: Raw user question
            chat_history: Prior turns, oldest first

        Returns:
            RetrievalResult: Up to k chunks by descending similarity

        Raises:
            SynthesisError: Rewrite failed
            IndexUnavailableError: Vector search failed
        """
        search_query = await self.arewrite(question, chat_history)
        results = await run_in_threadpool(self._vector_store.similarity_search, search_query, self.k)
        logger.info(f"{__name__}:aretrieve - Retrieved {len(results)} chunks (k={self.k})")
        return results
