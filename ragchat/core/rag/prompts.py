"""
Prompt templates for query rewriting and answer synthesis.

Dependencies: langchain_core.prompts
System role: Prompt definitions for the RAG conversation pipeline
"""

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

from ragchat.boundary.vdb.vector_schemas import RetrievalResult

REPHRASE_INSTRUCTION = (
    "Given the above conversation, generate a search query to look up in order "
    "to get information relevant to the conversation"
)

ANSWER_SYSTEM_PROMPT = "Answer the user's questions based on the below context:\n\n{context}"

# History, then the follow-up question, then the rewrite instruction.
REPHRASE_PROMPT = ChatPromptTemplate.from_messages([
    MessagesPlaceholder("chat_history"),
    ("user", "{input}"),
    ("user", REPHRASE_INSTRUCTION),
])

ANSWER_PROMPT = ChatPromptTemplate.from_messages([
    ("system", ANSWER_SYSTEM_PROMPT),
    MessagesPlaceholder("chat_history"),
    ("user", "{input}"),
])

DOCUMENT_SEPARATOR = "\n\n"


def format_context(results: RetrievalResult) -> str:
    """Stuff retrieved chunk contents into a single context string."""
    return DOCUMENT_SEPARATOR.join(result.content for result in results)


def content_to_text(content) -> str:
    """
    Flatten message content to plain text.

    Some providers return a list of content blocks instead of a string.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else str(item))
            for item in content
        )
    return str(content) if content is not None else ""
