"""
Chat domain models and schemas.

Request/response schemas for the query endpoint, plus conversion of the
wire-format history into LangChain messages.

Dependencies: pydantic, langchain_core
System role: Query API contracts
"""

from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from pydantic import BaseModel, ConfigDict, Field

SOURCE_PREVIEW_CHARS = 200


class HistoryMessage(BaseModel):
    """Single prior turn as sent by the browser."""

    type: str = Field(description="Message author: 'human' or 'ai'")
    content: str = Field(description="Message content")


class QueryRequest(BaseModel):
    """Request schema for questions."""

    query: str | None = Field(default=None, description="User question")
    history: list[HistoryMessage] | None = Field(default=None, description="Prior turns, oldest first")
    stream: bool = Field(default=False, description="Stream tokens as Server-Sent Events")


class SourceDocument(BaseModel):
    """Retrieved chunk returned alongside an answer."""

    content: str = Field(description="Preview of the chunk text")
    metadata: dict[str, Any] = Field(default_factory=dict)


class QueryResponse(BaseModel):
    """Response schema for non-streaming answers."""

    model_config = ConfigDict(populate_by_name=True)

    answer: str
    sources: list[SourceDocument]
    retrieved_docs: int = Field(alias="retrievedDocs")


def to_chat_history(history: list[HistoryMessage] | None) -> list[BaseMessage]:
    """
    Convert wire-format history into LangChain messages.

    Entries with an unknown type are dropped.

    Args:
        history: Messages from the request body

    Returns:
        list[BaseMessage]: HumanMessage/AIMessage list in the same order
    """
    messages: list[BaseMessage] = []
    for msg in history or []:
        if msg.type == "human":
            messages.append(HumanMessage(content=msg.content))
        elif msg.type == "ai":
            messages.append(AIMessage(content=msg.content))
    return messages
