"""
Answer synthesizer.

Stuffs retrieved chunks into the system prompt, appends the conversation
history and the question, and calls the chat model either once (blocking)
or as a token stream.

Dependencies: langchain_core, ragchat.core.rag.prompts
System role: Generation stage of the RAG conversation pipeline
"""

import logging
from collections.abc import AsyncIterator

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate

from ragchat.boundary.vdb.vector_schemas import RetrievalResult
from ragchat.core.exceptions import SynthesisError
from ragchat.core.rag.prompts import ANSWER_PROMPT, content_to_text, format_context
from ragchat.core.rag.schemas import QueryResult

logger = logging.getLogger(__name__)


class AnswerStream:
    """
    Cancellable, finite, single-pass stream of answer fragments.

    Wraps the model's async token stream. Closing it (explicitly, through
    ``async with``, or on exhaustion/failure) closes the model stream and
    releases its connection. Once finished it yields nothing further.
    """

    def __init__(self, source: AsyncIterator, sources: RetrievalResult) -> None:
        """
        Args:
            source: Model stream of message chunks (``llm.astream(...)``)
            sources: Chunks the answer is grounded on
        """
        self._source = source
        self.sources = sources
        self.tokens_emitted = False
        self.fragment_count = 0
        self._parts: list[str] = []
        self._closed = False

    @property
    def answer(self) -> str:
        """Text streamed so far."""
        return "".join(self._parts)

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "AnswerStream":
        return self

    async def __anext__(self) -> str:
        if self._closed:
            raise StopAsyncIteration

        while True:
            try:
                chunk = await self._source.__anext__()
            except StopAsyncIteration:
                await self.aclose()
                logger.info(
                    f"{__name__}:__anext__ - Stream finished: {self.fragment_count} fragments, "
                    f"answer_len={len(self.answer)}"
                )
                raise
            except Exception as e:
                await self.aclose()
                logger.error(
                    f"{__name__}:__anext__ - Model stream failed after {self.fragment_count} fragments: "
                    f"{type(e).__name__}: {e}"
                )
                raise SynthesisError(
                    f"Answer generation failed: {e}",
                    stage="generate",
                    tokens_emitted=self.tokens_emitted,
                ) from e

            text = content_to_text(getattr(chunk, "content", chunk))
            if text:
                self.tokens_emitted = True
                self.fragment_count += 1
                self._parts.append(text)
                return text

    async def aclose(self) -> None:
        """Close the underlying model stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        close = getattr(self._source, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "AnswerStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class AnswerSynthesizer:
    """Context-stuffing answer generation over a chat model."""

    def __init__(self, llm: BaseChatModel, prompt: ChatPromptTemplate = ANSWER_PROMPT) -> None:
        """
        Args:
            llm: Chat model used for generation
            prompt: Answer prompt with ``context``, ``chat_history`` and ``input`` variables
        """
        self._llm = llm
        self._prompt = prompt

    def build_messages(
        self,
        question: str,
        chat_history: list[BaseMessage] | None,
        results: RetrievalResult,
    ) -> list[BaseMessage]:
        """System prompt with stuffed context, then history, then the question."""
        return self._prompt.invoke({
            "context": format_context(results),
            "chat_history": list(chat_history or []),
            "input": question,
        }).to_messages()

    async def ainvoke(
        self,
        question: str,
        chat_history: list[BaseMessage] | None,
        results: RetrievalResult,
    ) -> QueryResult:
        """
        Generate the complete answer.

        Args:
            question: User question
            chat_history: Prior turns, oldest first
            results: Retrieved chunks to stuff into the prompt

        Returns:
            QueryResult: Answer text and source chunks

        Raises:
            SynthesisError: Model call failed (no tokens emitted)
        """
        messages = self.build_messages(question, chat_history, results)
        try:
            response = await self._llm.ainvoke(messages)
        except Exception as e:
            logger.error(f"{__name__}:ainvoke - FAILED: {type(e).__name__}: {e}")
            raise SynthesisError(f"Answer generation failed: {e}", stage="generate") from e

        answer = content_to_text(response.content)
        logger.info(f"{__name__}:ainvoke - Generated answer_len={len(answer)} from {len(results)} chunks")
        return QueryResult(answer=answer, sources=list(results))

    def astream(
        self,
        question: str,
        chat_history: list[BaseMessage] | None,
        results: RetrievalResult,
    ) -> AnswerStream:
        """
        Start a streamed answer. No model request is made until the first fragment is pulled.

        Args:
            question: User question
            chat_history: Prior turns, oldest first
            results: Retrieved chunks to stuff into the prompt

        Returns:
            AnswerStream: Async iterator of answer fragments
        """
        messages = self.build_messages(question, chat_history, results)
        return AnswerStream(self._llm.astream(messages), sources=list(results))
