"""
Retrieval-augmented conversation pipeline.

History-aware retrieval, answer synthesis (blocking or streamed) and the
orchestrating ConversationPipeline.
"""

from ragchat.core.rag.answer_synthesizer import AnswerStream, AnswerSynthesizer
from ragchat.core.rag.history_aware_retriever import HistoryAwareRetriever
from ragchat.core.rag.pipeline import ConversationPipeline
from ragchat.core.rag.schemas import IngestionResult, PipelineState, QueryMode, QueryResult

__all__ = [
    "AnswerStream",
    "AnswerSynthesizer",
    "ConversationPipeline",
    "HistoryAwareRetriever",
    "IngestionResult",
    "PipelineState",
    "QueryMode",
    "QueryResult",
]
