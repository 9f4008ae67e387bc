"""
Shared test fixtures and configuration for entire test suite.

Provides: fake embeddings and chat models, a fake model provider, settings
pointing at a temporary FAISS index, sample documents
Dependencies: pytest, langchain_core
System role: Test infrastructure and fixture management
"""

from pathlib import Path

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding, Embeddings
from langchain_core.language_models import BaseChatModel
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from ragchat.configs.api import APISettings
from ragchat.configs.settings import Settings
from ragchat.configs.vector_store import VectorStoreSettings

EMBEDDING_SIZE = 32

FILLER = ("lorem ipsum dolor sit amet " * 11).strip()


def paragraph(index: int) -> str:
    """About 300 characters of distinct filler text."""
    return f"Section {index}. {FILLER}"


class FakeProvider:
    """ModelProvider returning prebuilt models and counting builds."""

    name = "fake"

    def __init__(self, llm: BaseChatModel, embeddings: Embeddings) -> None:
        self._llm = llm
        self._embeddings = embeddings
        self.chat_model_calls = 0
        self.embeddings_calls = 0

    def chat_model(self) -> BaseChatModel:
        self.chat_model_calls += 1
        return self._llm

    def embeddings(self) -> Embeddings:
        self.embeddings_calls += 1
        return self._embeddings


@pytest.fixture
def fake_embeddings() -> DeterministicFakeEmbedding:
    """Deterministic embeddings: equal texts get equal vectors."""
    return DeterministicFakeEmbedding(size=EMBEDDING_SIZE)


@pytest.fixture
def fake_llm() -> FakeListChatModel:
    """Chat model that always answers about Y."""
    return FakeListChatModel(responses=["X is a protocol for Y."])


@pytest.fixture
def fake_provider(fake_llm: FakeListChatModel, fake_embeddings: DeterministicFakeEmbedding) -> FakeProvider:
    return FakeProvider(fake_llm, fake_embeddings)


@pytest.fixture
def index_dir(tmp_path: Path) -> Path:
    return tmp_path / "faiss_index"


@pytest.fixture
def settings(index_dir: Path) -> Settings:
    """Settings with the vector index under tmp_path and a known frontend origin."""
    return Settings(
        vector_store=VectorStoreSettings(index_dir=str(index_dir), index_name="test", top_k=2),
        api=APISettings(
            frontend_base_url="https://frontend.example.com",
            allowed_origins=["http://127.0.0.1:5500"],
        ),
    )


@pytest.fixture
def long_text() -> str:
    """Ten ~300 character paragraphs (about 3000 characters)."""
    paragraphs = [paragraph(i) for i in range(9)] + ["X is a protocol for Y. " + FILLER]
    return "\n\n".join(paragraphs)


@pytest.fixture
def text_file(tmp_path: Path, long_text: str) -> Path:
    path = tmp_path / "document.txt"
    path.write_text(long_text, encoding="utf-8")
    return path


@pytest.fixture
def make_provider(fake_embeddings: DeterministicFakeEmbedding):
    """Factory for providers wrapping a given chat model."""

    def _make(llm: BaseChatModel, embeddings: Embeddings | None = None) -> FakeProvider:
        return FakeProvider(llm, embeddings or fake_embeddings)

    return _make
